# shopassist/api/deps.py
from fastapi import HTTPException, Request
from shopassist.domain.services.assistant_svc import Assistant

# Dependency for injecting the assistant built at startup into endpoints
def assistant_dep(request: Request) -> Assistant:
    assistant = getattr(request.app.state, "assistant", None)
    if assistant is None:
        raise HTTPException(status_code=503, detail="Assistant not initialized")
    return assistant
