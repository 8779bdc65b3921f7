import uvicorn

from verb_flow.config import settings

if __name__ == "__main__":
    print(f"Starting Verb Flow server at http://{settings.host}:{settings.port}")

    # "verb_flow.main:app": Uvicorn will look for the 'app' instance in 'verb_flow/main.py'.
    # reload=True restarts the server when code changes; set VERB_FLOW_RELOAD=false in production.
    uvicorn.run(
        "verb_flow.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )
