#!/usr/bin/env python
"""Main entry point for the genre recommender."""

import argparse
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from loguru import logger


def start_api_server(port=None):
    """Start the FastAPI server."""
    logger.info("Starting API server...")
    from genre_recommender.serving import run_server
    run_server(port=port)


def recommend(genre: str, name: str, count: int) -> int:
    """Print recommendations for one reference item."""
    from genre_recommender.serving import RecommendationService, STATUS_OK

    service = RecommendationService()
    outcome = service.recommend(genre, name, count)

    if outcome.status != STATUS_OK:
        logger.warning(f"No recommendations ({outcome.status})")
    elif not outcome.results:
        logger.warning("No recommendations found.")

    for i, result in enumerate(outcome.results, start=1):
        print(f"{i:>3}. {result.name:<40} {result.similarity_percentage:>8}  "
              f"(rating {result.entry.rating or '-'})")

    for message in outcome.diagnostics:
        logger.debug(f"  {message}")

    return 0 if outcome.results else 1


def warm_cache(genre: str) -> int:
    """Generate embeddings for every uncached item of a genre."""
    from genre_recommender.serving import RecommendationService

    service = RecommendationService()
    report = service.warm_cache(genre)
    logger.info(
        f"{len(report.generated)} generated, {report.already_cached} already cached, "
        f"{len(report.failures)} failed"
    )
    for message in report.diagnostics:
        logger.warning(f"  {message}")
    return 0 if not report.failures else 1


def run_tests():
    """Run system tests."""
    logger.info("Running tests...")
    import pytest

    exit_code = pytest.main([
        "tests/",
        "-v",
        "--cov=genre_recommender",
        "--cov-report=term-missing"
    ])

    if exit_code == 0:
        logger.success("All tests passed!")
    else:
        logger.error(f"Tests failed with exit code {exit_code}")

    return exit_code


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Genre recommender CLI"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start API server")
    serve_parser.add_argument(
        "--port", type=int, default=None, help="Port to run server on"
    )

    # Recommend command
    recommend_parser = subparsers.add_parser("recommend", help="Recommend similar items")
    recommend_parser.add_argument("genre", help="Genre (catalog file name without .csv)")
    recommend_parser.add_argument("name", help="Reference item name")
    recommend_parser.add_argument(
        "--count", type=int, default=5, help="Number of recommendations"
    )

    # Warm command
    warm_parser = subparsers.add_parser("warm", help="Pre-compute a genre's embeddings")
    warm_parser.add_argument("genre", help="Genre (catalog file name without .csv)")

    # Test command
    subparsers.add_parser("test", help="Run tests")

    args = parser.parse_args()

    if args.command == "serve":
        start_api_server(args.port)
    elif args.command == "recommend":
        sys.exit(recommend(args.genre, args.name, args.count))
    elif args.command == "warm":
        sys.exit(warm_cache(args.genre))
    elif args.command == "test":
        sys.exit(run_tests())
    else:
        parser.print_help()

        print("\n" + "="*50)
        print("QUICK START GUIDE")
        print("="*50)
        print("\n1. Put one catalog CSV per genre in data/ (e.g. data/Drama.csv)")
        print("\n2. Start Ollama with the nomic-embed-text model")
        print("\n3. Pre-compute embeddings:")
        print("   python main.py warm Drama")
        print("\n4. Ask for recommendations:")
        print("   python main.py recommend Drama \"The Godfather\" --count 5")
        print("\n5. Or start the API server:")
        print("   python main.py serve")
        print("\n" + "="*50)


if __name__ == "__main__":
    # Configure logging
    logger.remove()
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level="INFO"
    )
    logger.add(
        "logs/recommender.log",
        rotation="50 MB",
        retention="7 days",
        level="DEBUG"
    )

    main()
