import os
import sys
import uvicorn
import logging
import traceback

# Configure logging to stdout (Azure App Service reads from here)
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[logging.StreamHandler(sys.stdout)]
)
logger = logging.getLogger(__name__)

# Add the src directory to Python path
current_dir = os.path.dirname(os.path.abspath(__file__))
src_path = os.path.join(current_dir, 'src')
sys.path.insert(0, src_path)

logger.info("=" * 60)
logger.info("Blob Storage API Startup")
logger.info("=" * 60)
logger.info(f"Python version: {sys.version.split()[0]}")
logger.info(f"Source path: {src_path}")

# Log critical environment variables (without exposing secrets)
logger.info("Environment Configuration:")
logger.info(f"  PORT: {os.environ.get('PORT', '8000')}")
logger.info(f"  APP_ENV: {os.environ.get('APP_ENV', 'not set')}")
logger.info(f"  AZURE_KEY_VAULT_NAME: {os.environ.get('AZURE_KEY_VAULT_NAME', 'not set')}")
logger.info(f"  AZURE_BLOB_AUTH_MODE: {os.environ.get('AZURE_BLOB_AUTH_MODE', 'connection_string')}")
logger.info(f"  AZURE_BLOB_CONNECTION_STRING: {'set' if os.environ.get('AZURE_BLOB_CONNECTION_STRING') else 'not set'}")
logger.info(f"  AZURE_BLOB_ACCOUNT_NAME: {os.environ.get('AZURE_BLOB_ACCOUNT_NAME', 'not set')}")
logger.info(f"  AZURE_BLOB_CONTAINER_NAME: {os.environ.get('AZURE_BLOB_CONTAINER_NAME', 'files')}")
logger.info(f"  COSMOS_CONNECTION_STRING: {'set' if os.environ.get('COSMOS_CONNECTION_STRING') else 'not set'}")

if __name__ == "__main__":
    try:
        from blobstorageapi.core.config import get_settings
        try:
            settings = get_settings()
        except ValueError as ve:
            logger.error(f"Configuration validation failed: {ve}")
            logger.error(traceback.format_exc())
            logger.error("Common configuration issues:")
            logger.error("  1. AZURE_BLOB_CONNECTION_STRING must start with DefaultEndpointsProtocol=")
            logger.error("  2. COSMOS_CONNECTION_STRING must start with AccountEndpoint=")
            logger.error("  3. AZURE_BLOB_AUTH_MODE must be connection_string or managed_identity")
            sys.exit(1)

        port = int(os.environ.get("PORT", settings.port))
        host = os.environ.get("HOST", settings.host)

        logger.info(f"Starting {settings.app_name} v{settings.app_version} ({settings.app_env}) on {host}:{port}")
        uvicorn.run(
            "blobstorageapi.app:app",
            host=host,
            port=port,
            workers=1,
            log_level="info",
            access_log=True,
            # Timeout settings for Azure App Service
            timeout_keep_alive=75,
            timeout_graceful_shutdown=30,
        )
    except KeyboardInterrupt:
        logger.info("Shutting down due to keyboard interrupt")
        sys.exit(0)
    except Exception as e:
        logger.error(f"CRITICAL: Failed to start application: {type(e).__name__}: {e}")
        logger.error(traceback.format_exc())
        sys.exit(1)
