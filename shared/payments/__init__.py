from .stripe_gateway import StripeGateway, provider_message

__all__ = ["StripeGateway", "provider_message"]
