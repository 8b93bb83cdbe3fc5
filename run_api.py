"""
API Server Runner

Entry point for running the FastAPI server with environment setup and
startup diagnostics.

Design Considerations:
- Environment variables set before application settings are read
- Missing generation key reported up front, not on first request
- Detailed logging for operational visibility
"""

import argparse
import logging
import os
import sys
import traceback

import uvicorn
from dotenv import load_dotenv

from src.utils.logging_setup import setup_logging

logger = logging.getLogger("api_runner")


def parse_arguments():
    """Parse command line arguments for the API server."""
    parser = argparse.ArgumentParser(description="Run the task parsing API server")

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="Host to bind the server to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="Port to bind the server to (default: 8000)"
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development"
    )

    parser.add_argument(
        "--env",
        type=str,
        choices=["development", "testing", "production"],
        default="development",
        help="Environment to run in (default: development)"
    )

    return parser.parse_args()


def setup_environment(env):
    """
    Export environment-dependent settings before the application loads.

    Args:
        env: Environment name (development, testing, production)
    """
    os.environ["ENVIRONMENT"] = env
    os.environ["DEBUG"] = "true" if env in ["development", "testing"] else "false"
    os.makedirs("logs", exist_ok=True)


def verify_generation_environment():
    """Log whether the AI pathway will be available."""
    if os.environ.get("GROQ_API_KEY"):
        logger.info("GROQ_API_KEY found: AI task parsing and email triage enabled")
    else:
        logger.warning("GROQ_API_KEY not set: task parsing will use the basic parser only")
        logger.warning("Email triage will return the generic acknowledgement reply")


def main():
    """Run the API server."""
    args = parse_arguments()
    load_dotenv()
    setup_environment(args.env)
    setup_logging(logging.INFO)
    verify_generation_environment()

    logger.info(f"Starting API server in {args.env} mode")
    logger.info(f"Server will be available at http://{args.host}:{args.port}")

    if args.env == "development":
        logger.info(f"API documentation will be available at http://{args.host}:{args.port}/docs")

    uvicorn.run(
        "api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info" if args.env == "production" else "debug"
    )


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        logger.info("Server stopped by user")
        sys.exit(0)
    except Exception as e:
        logger.error(f"Error running server: {str(e)}")
        logger.error(traceback.format_exc())
        sys.exit(1)
