#!/usr/bin/env python3
"""
Unified entry point for the Bookshop bot
Supports both local development (polling) and production deployment (webhook)
"""

import asyncio
import logging
import os

from dotenv import load_dotenv
from telegram import Update
from telegram.ext import Application, CommandHandler, ContextTypes

from bookshop.infrastructure.configuration.config import ConfigValidator, get_config
from bookshop.infrastructure.container.dependency_injection import initialize_container
from bookshop.infrastructure.database.operations import DatabaseManager, init_db
from bookshop.infrastructure.logging.logging_config import ProductionLogger
from bookshop.infrastructure.utilities.exceptions import handle_error
from bookshop.presentation.telegram_bot.handlers import register_handlers

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)


def setup_bot() -> Application:
    """Setup and configure the bot application"""
    ProductionLogger.setup_logging()

    config = get_config()
    logger.info("Configuration loaded successfully")

    validator = ConfigValidator(config)
    if not validator.validate_all():
        report = validator.get_validation_report()
        if config.environment == "production":
            logger.critical("Configuration invalid - stopping startup: %s", report["errors"])
            raise RuntimeError("Production environment not properly configured")
        logger.warning("Configuration problems: %s", report["errors"])

    logger.info("Initializing database...")
    db_manager = init_db(DatabaseManager(config))
    logger.info("Database initialization completed")

    initialize_container(config=config, db_manager=db_manager)
    logger.info("Dependency container initialized")

    logger.info("Creating Telegram application...")
    application = Application.builder().token(config.bot_token).build()

    application.add_handler(CommandHandler("ping", ping_handler))
    register_handlers(application)
    application.add_error_handler(log_unhandled_error)

    return application


async def ping_handler(update: Update, _: ContextTypes.DEFAULT_TYPE):
    """Simple ping handler"""
    await update.message.reply_text("pong")


async def log_unhandled_error(update: object, context: ContextTypes.DEFAULT_TYPE):
    """Last-resort logging for errors no handler dealt with"""
    if isinstance(update, Update):
        await handle_error(update, context.error, "unhandled")
    else:
        logger.error("Unhandled error for update %s", update, exc_info=context.error)


async def cleanup_webhook(bot):
    """Clean up any existing webhook to prevent conflicts"""
    await bot.delete_webhook()
    logger.info("Cleaned up existing webhook")


def run_polling():
    """Run bot in polling mode for local development"""
    logger.info("Starting Bookshop bot in LOCAL DEVELOPMENT mode (polling)...")
    application = setup_bot()

    async def run_bot():
        await application.initialize()
        await cleanup_webhook(application.bot)
        await application.start()
        await application.updater.start_polling()
        logger.info("Bot started successfully! Send /start to your bot in Telegram.")
        try:
            await asyncio.Event().wait()
        finally:
            await application.updater.stop()
            await application.stop()
            await application.shutdown()

    try:
        asyncio.run(run_bot())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")


def create_webhook_app():
    """Build the FastAPI app that receives Telegram updates"""
    from contextlib import asynccontextmanager

    from fastapi import FastAPI, HTTPException, Request
    from fastapi.responses import JSONResponse

    state = {"application": None}

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        application = setup_bot()
        await application.initialize()
        await application.start()
        await cleanup_webhook(application.bot)

        webhook_url = os.getenv("WEBHOOK_URL") or os.getenv("RENDER_EXTERNAL_URL")
        if webhook_url:
            webhook_endpoint = f"{webhook_url.rstrip('/')}/webhook"
            await application.bot.set_webhook(url=webhook_endpoint)
            logger.info("Webhook set to: %s", webhook_endpoint)
        else:
            logger.warning("WEBHOOK_URL not set! Bot will not receive updates.")

        state["application"] = application
        logger.info("Bot started successfully!")
        yield

        await application.stop()
        await application.shutdown()
        logger.info("Bot shutdown completed")

    app = FastAPI(title="Bookshop Bot", lifespan=lifespan)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        from bookshop.infrastructure.container.dependency_injection import get_container

        application = state["application"]
        db_manager = get_container().get_db_manager() if application else None
        database = db_manager.health_check() if db_manager else {"status": "unknown"}
        healthy = application is not None and database.get("status") == "healthy"
        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "healthy" if healthy else "unhealthy",
                "bot_initialized": application is not None,
                "database": database,
            },
        )

    @app.post("/webhook")
    async def webhook_handler(request: Request):
        """Handle incoming webhook updates"""
        application = state["application"]
        if application is None:
            raise HTTPException(status_code=503, detail="Bot not initialized")
        update_data = await request.json()
        update = Update.de_json(update_data, application.bot)
        await application.process_update(update)
        return JSONResponse(content={"status": "ok"})

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "Bookshop Bot API",
            "status": "running",
            "version": "1.0.0",
            "endpoints": {"health": "/health", "webhook": "/webhook"},
        }

    return app


def run_webhook():
    """Run bot in webhook mode for production deployment"""
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    logger.info("Starting FastAPI server on port %s", port)
    uvicorn.run(create_webhook_app(), host="0.0.0.0", port=port, log_level="info")


def main():
    """Main entry point"""
    if not os.getenv("BOT_TOKEN"):
        print("❌ Missing required environment variable: BOT_TOKEN")
        return 1

    # Webhook mode when explicitly requested or when deployed as a web service
    should_use_webhook = (
        os.getenv("WEBHOOK_MODE", "false").lower() == "true"
        or os.getenv("RENDER_EXTERNAL_URL") is not None
        or os.getenv("PORT") is not None
    )

    if should_use_webhook:
        print("🌐 Running in WEBHOOK mode (production deployment)")
        run_webhook()
    else:
        print("🔄 Running in POLLING mode (local development)")
        run_polling()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
