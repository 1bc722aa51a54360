import logging
import logging.config
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from shell_executor.config import Settings, get_settings
from shell_executor.logging_config import get_logging_config
from shell_executor.models import ConfigurationPayload, ExecuteResponse, PluginInfo
from shell_executor.plugin import ShellExecutorPlugin

BASE_DIR = Path(__file__).resolve().parent

logger = logging.getLogger(__name__)

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))
router = APIRouter(prefix="/plugins/shellexecutor")


# --- dependencies ---


def get_plugin(request: Request) -> ShellExecutorPlugin:
    plugin = getattr(request.app.state, "plugin", None)
    if plugin is None:
        raise HTTPException(503, "Plugin not initialized")
    return plugin


async def require_elevation(
    request: Request,
    x_api_key: str | None = Header(None, description="Elevated API key"),
) -> None:
    """Admit only callers presenting one of the configured API keys."""
    settings: Settings = request.app.state.settings
    if not settings.api_keys:
        raise HTTPException(503, "No API keys configured")
    if not x_api_key or x_api_key not in settings.api_keys:
        raise HTTPException(401, "Invalid API key")


# --- HTML routes ---


@router.get("/ConfigurationPage", response_class=HTMLResponse)
async def configuration_page(
    request: Request, plugin: ShellExecutorPlugin = Depends(get_plugin)
):
    return templates.TemplateResponse(
        request,
        "config.html",
        {"plugin": plugin, "base_url": router.prefix},
    )


# --- JSON API routes ---


@router.get("")
async def plugin_info(plugin: ShellExecutorPlugin = Depends(get_plugin)) -> PluginInfo:
    return PluginInfo(id=plugin.id, name=plugin.name, description=plugin.description)


@router.post("/Execute", dependencies=[Depends(require_elevation)])
async def execute_script(
    plugin: ShellExecutorPlugin = Depends(get_plugin),
) -> ExecuteResponse:
    try:
        logger.info("Executing script via API")
        result = await plugin.execute()
    except Exception as e:
        logger.exception("Failed to execute script via API")
        return ExecuteResponse(success=False, message=str(e))
    if result is not None and result.error:
        return ExecuteResponse(success=False, message=result.error)
    return ExecuteResponse(success=True, message="Script executed successfully")


@router.get("/Configuration", dependencies=[Depends(require_elevation)])
async def read_configuration(
    plugin: ShellExecutorPlugin = Depends(get_plugin),
) -> ConfigurationPayload:
    return ConfigurationPayload(script_content=plugin.configuration.script_content)


@router.post(
    "/Configuration",
    dependencies=[Depends(require_elevation)],
    response_model=None,
)
async def update_configuration(
    payload: ConfigurationPayload,
    plugin: ShellExecutorPlugin = Depends(get_plugin),
) -> dict:
    try:
        config = await plugin.on_configuration_updated(payload.script_content)
    except Exception as e:
        logger.exception("Failed to save configuration via API")
        return ExecuteResponse(success=False, message=str(e)).model_dump()
    return config.model_dump(by_alias=True)


# --- application ---


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        plugin = ShellExecutorPlugin.from_settings(settings)
        app.state.plugin = plugin
        await plugin.on_load()
        yield

    app = FastAPI(title="Shell Executor", lifespan=lifespan)
    app.state.settings = settings
    app.include_router(router)
    return app


def run() -> None:
    settings = get_settings()
    log_config = get_logging_config(settings.log_level)
    logging.config.dictConfig(log_config)
    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_config=log_config,
    )


if __name__ == "__main__":
    run()
