"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from meal_planner.api.routes import router as api_router
from meal_planner.api.telegram_models import TelegramUpdate
from meal_planner.app_logging import configure_logging
from meal_planner.config import parse_allowed_user_ids
from meal_planner.containers import AppContainer
from meal_planner.errors import MealPlannerError
from meal_planner.telegram_commands import chat_menu_button, telegram_commands


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)
    allowed_user_ids = parse_allowed_user_ids(
        container.settings.telegram_allowed_user_ids
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        try:
            await app.state.container.telegram_client.set_my_commands(
                telegram_commands()
            )
            await app.state.container.telegram_client.set_chat_menu_button(
                chat_menu_button(app.state.container.settings.web_app_url)
            )
        except Exception:
            logger.exception("Failed to sync Telegram bot commands")
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(api_router)

    @app.exception_handler(MealPlannerError)
    async def handle_planner_error(
        request: Request, exc: MealPlannerError
    ) -> JSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=exc.status_code, content={"message": exc.message}
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "message": "Validation error",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"message": "Internal server error"},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/telegram/webhook")
    async def telegram_webhook(
        update: TelegramUpdate, request: Request
    ) -> dict[str, str]:
        """Handle Telegram webhook updates."""
        state_container: AppContainer = request.app.state.container
        message = update.message
        if message is None or message.from_user is None:
            return {"status": "ok"}
        sender = message.from_user
        if not _is_user_allowed(sender.id, allowed_user_ids):
            await state_container.telegram_client.send_message(
                chat_id=message.chat.id,
                text="This bot is private.",
            )
            return {"status": "ok"}

        if message.web_app_data is not None:
            await state_container.web_app_data_handler.handle(
                telegram_user_id=sender.id,
                chat_id=message.chat.id,
                raw=message.web_app_data.data,
            )
            return {"status": "ok"}

        command = _command_name(message.text)
        if command == "start":
            await state_container.start_command_handler.handle(
                telegram_user_id=sender.id,
                chat_id=message.chat.id,
                first_name=sender.first_name,
            )
        elif command == "help":
            await state_container.help_command_handler.handle(chat_id=message.chat.id)
        elif command is None:
            await state_container.open_app_prompt_handler.handle(
                chat_id=message.chat.id
            )
        return {"status": "ok"}

    return app


def _command_name(text: str | None) -> str | None:
    """Return the bot command in ``text`` without slash or bot mention."""
    if not text or not text.startswith("/"):
        return None
    head = text.split(maxsplit=1)[0]
    return head[1:].split("@", maxsplit=1)[0].lower()


def _is_user_allowed(user_id: int, allowed: set[int] | None) -> bool:
    """Return true when the user is allowed to interact with the bot."""
    return allowed is None or user_id in allowed
