"""
Basic usage example of request-pipeline.

Demonstrates:
- Building the standard pipeline with create_app()
- Registering route handlers on a Router
- Reading the parsed body and the attached identity
"""

from request_pipeline import (
    CallbackIdentityProvider,
    Identity,
    InvalidCredentials,
    RequestContext,
    Router,
    Settings,
    create_app,
)

router = Router()


# Mock token verifier (replace with JWTIdentityProvider or a remote check)
async def verify_token(token: str) -> Identity:
    if token == "valid-token":
        return Identity(subject="user123", claims={"email": "user@example.com"})
    raise InvalidCredentials("Invalid token")


@router.get("/")
async def public_endpoint(ctx: RequestContext):
    """Public endpoint - identity is optional."""
    if ctx.identity is None:
        return {"message": "Hello, World!"}
    return {"message": f"Hello, {ctx.identity.claims['email']}!"}


@router.post("/echo")
async def echo(ctx: RequestContext):
    """Return the parsed JSON body."""
    return {"received": ctx.body}


app = create_app(
    Settings(cors_origin="http://localhost:5173"),
    router=router,
    identity_provider=CallbackIdentityProvider(verify_token),
)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=5000)

    # Test with:
    # curl http://localhost:5000/health
    # curl -H "Authorization: Bearer valid-token" http://localhost:5000/
    # curl -X POST -H "Content-Type: application/json" -d '{"a": 1}' http://localhost:5000/echo
