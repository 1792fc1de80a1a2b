"""Executor Agent API.

Runs tool plans against the tool service:
- Parallel execution of independent tools
- Chained execution with {{tool.field}} output references
- Tool catalog lookup
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from executor_agent import __version__
from executor_agent.api.routes import executions, tools
from executor_agent.executor.engine import ExecutionEngine
from executor_agent.tools.client import ToolServiceClient
from executor_agent.tools.registry import get_tool_registry

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("Loading tool catalog...")
    tool_registry = get_tool_registry()
    logger.info(f"Loaded {tool_registry.count()} tools ({tool_registry.source})")
    tools.init_registry(tool_registry)

    client = ToolServiceClient()
    executions.init_engine(ExecutionEngine(tool_registry, client))

    logger.info("Executor Agent API ready")
    yield
    logger.info("Shutting down Executor Agent API")
    client.close()


app = FastAPI(
    title="Executor Agent API",
    description="""
## Plan Execution Service

Executes planner-selected tool invocations against the tool service.

### Key Endpoints

- `POST /v1/executions` - Run independent tools in parallel
- `POST /v1/executions/chained` - Run steps in order, chaining outputs
- `POST /v1/executions/from-plan` - Execute a raw planner response
- `GET /v1/executions/{run_id}` - Fetch a run result
- `GET /v1/tools` - List the tool catalog
""",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(executions.router, prefix="/v1")
app.include_router(tools.router, prefix="/v1")


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "service": "Executor Agent API",
        "version": __version__,
        "docs": "/docs",
        "endpoints": {
            "executions": "/v1/executions",
            "tools": "/v1/tools",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "tools_loaded": tools._registry.count() if tools._registry else 0,
        "runs_stored": executions.get_run_store().count(),
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "executor_agent.api.main:app",
        host="0.0.0.0",
        port=8002,
        reload=True,
    )
