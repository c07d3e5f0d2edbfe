from identity.api.routes import contact_router, customer_router

__all__ = ["contact_router", "customer_router"]
