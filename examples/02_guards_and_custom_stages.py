"""
Route guards and custom stages.

Demonstrates:
- Protecting routes with RequireIdentity and HasRole
- Writing a custom Stage that short-circuits with Respond
- Observing stage outcomes through a hook
"""

from request_pipeline import (
    CONTINUE,
    AfterStage,
    HasRole,
    JWTIdentityProvider,
    Outcome,
    PipelineResponse,
    RequestContext,
    RequireIdentity,
    Respond,
    Router,
    Settings,
    Stage,
    StageCategory,
    create_app,
)


class MaintenanceMode(Stage):
    """Answer 503 for every write while maintenance is on."""

    category = StageCategory.CUSTOM

    def __init__(self, enabled: bool = False) -> None:
        self.enabled = enabled

    async def process(self, ctx: RequestContext) -> Outcome:
        if self.enabled and ctx.method in {"POST", "PUT", "PATCH", "DELETE"}:
            return Respond(
                PipelineResponse.json({"detail": "Down for maintenance"}, status_code=503)
            )
        return CONTINUE


router = Router()


@router.get("/me", guards=[RequireIdentity()])
async def me(ctx: RequestContext):
    return {"subject": ctx.identity.subject, "roles": list(ctx.identity.roles)}


admin = Router()


@admin.get("/stats")
async def stats(ctx: RequestContext):
    return {"requests": 42}


@admin.post("/reindex")
async def reindex(ctx: RequestContext):
    return None


router.include(admin, prefix="/admin", guards=[HasRole("admin")])


async def log_outcome(ctx, stage, outcome):
    print(f"{ctx.path}: {stage.name} -> {type(outcome).__name__}")


app = create_app(
    Settings(),
    router=router,
    identity_provider=JWTIdentityProvider("dev-secret", algorithms=["HS256"]),
    hooks=[AfterStage(log_outcome)],
)
app.pipeline.add(MaintenanceMode(enabled=False))


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=5000)
