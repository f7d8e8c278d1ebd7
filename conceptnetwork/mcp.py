"""FastMCP server for the concept network.

This module exposes the concept network engine as MCP tools: concept
search, concept details, learning paths, recommendations, network views,
statistics and export.
"""

import argparse
import logging
import signal
import sys
from threading import Lock
from typing import Any, Dict, List, Optional

from fastmcp import FastMCP

from .config import Config
from .engine import ConceptNetworkEngine

logger = logging.getLogger(__name__)

# Thread-safe singleton engine
_engine_lock = Lock()
_engine_instance: Optional[ConceptNetworkEngine] = None


def validate_string_param(
    value: Any, param_name: str, allow_empty: bool = False
) -> str:
    """Validate string parameter for MCP functions.

    Args:
        value: Value to validate
        param_name: Name of the parameter for error messages
        allow_empty: Whether to allow empty strings

    Returns:
        Validated string value

    Raises:
        ValueError: If validation fails
    """
    if not isinstance(value, str):
        raise ValueError(f"{param_name} must be a string")

    if not allow_empty and not value.strip():
        raise ValueError(f"{param_name} cannot be empty")

    return value.strip() if not allow_empty else value


def validate_int_param(
    value: Any, param_name: str, min_val: int = None, max_val: int = None
) -> int:
    """Validate integer parameter for MCP functions.

    Raises:
        ValueError: If value is not an integer within the given bounds
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{param_name} must be an integer")

    if min_val is not None and value < min_val:
        raise ValueError(f"{param_name} must be at least {min_val}")

    if max_val is not None and value > max_val:
        raise ValueError(f"{param_name} must be at most {max_val}")

    return value


def handle_mcp_errors(operation_name: str, func_impl, *args):
    """Common error handling for MCP functions.

    Args:
        operation_name: Name of the operation for error messages
        func_impl: The actual implementation function to call
        *args: Arguments to pass to the function

    Returns:
        Result from function or structured error dict
    """
    try:
        return func_impl(*args)
    except ValueError as e:
        error_msg = str(e)
        logger.warning(f"{operation_name} validation error: {error_msg}")
        return {"error": error_msg}
    except Exception as e:
        error_msg = f"{operation_name} failed: {str(e)}"
        logger.error(error_msg)
        return {"error": error_msg}


def initialize_engine(
    config_overrides: Optional[Dict[str, Any]] = None,
) -> ConceptNetworkEngine:
    """Initialize the engine with thread-safe singleton pattern.

    Args:
        config_overrides: Optional dictionary of configuration overrides from CLI args

    Returns:
        ConceptNetworkEngine instance
    """
    global _engine_instance

    with _engine_lock:
        if _engine_instance is None:
            try:
                config = Config(config_overrides=config_overrides)
                _engine_instance = ConceptNetworkEngine(config=config)
                logger.info("ConceptNetworkEngine initialized successfully")
                if config_overrides:
                    logger.info(
                        f"Applied CLI configuration overrides: {list(config_overrides.keys())}"
                    )
            except Exception as e:
                logger.error(f"Failed to initialize ConceptNetworkEngine: {e}")
                _engine_instance = None
                raise

    return _engine_instance


def get_engine() -> Optional[ConceptNetworkEngine]:
    """Get the current engine instance without initialization."""
    with _engine_lock:
        return _engine_instance


def set_engine(engine: Optional[ConceptNetworkEngine]) -> None:
    """Replace the engine singleton - primarily for testing."""
    global _engine_instance
    with _engine_lock:
        _engine_instance = engine


# Create FastMCP application
mcp = FastMCP("ConceptNetwork")


def _search_concepts_impl(query: str) -> Dict[str, Any]:
    query = validate_string_param(query, "query")
    results = initialize_engine().search_concepts(query)
    return {"query": query, "results": results, "count": len(results)}


@mcp.tool
def search_concepts(query: str) -> Dict[str, Any]:
    """Search concepts by title, category or tag.

    Args:
        query: Case-insensitive text to look for (at least 2 characters)

    Returns:
        Dictionary with the query, matching concept summaries and their count
    """
    return handle_mcp_errors("Concept search", _search_concepts_impl, query)


def _concept_details_impl(concept_id: str) -> Dict[str, Any]:
    concept_id = validate_string_param(concept_id, "concept_id")
    details = initialize_engine().get_concept_details(concept_id)
    if details is None:
        raise ValueError(f"Unknown concept: {concept_id}")
    return details


@mcp.tool
def concept_details(concept_id: str) -> Dict[str, Any]:
    """Get a concept with its centrality and connected concepts."""
    return handle_mcp_errors("Concept details", _concept_details_impl, concept_id)


def _learning_path_impl(from_title: str, to_title: str) -> Dict[str, Any]:
    from_title = validate_string_param(from_title, "from_title")
    to_title = validate_string_param(to_title, "to_title")
    path = initialize_engine().find_learning_path(from_title, to_title)
    return {
        "from": from_title,
        "to": to_title,
        "found": path is not None,
        "path": path or [],
    }


@mcp.tool
def learning_path(from_title: str, to_title: str) -> Dict[str, Any]:
    """Find a learning path between two concepts.

    Titles are matched case-insensitively by substring; the path minimizes
    difficulty jumps and category changes.

    Args:
        from_title: Starting concept title
        to_title: Goal concept title

    Returns:
        Dictionary with the path as a list of concept titles
    """
    return handle_mcp_errors("Learning path", _learning_path_impl, from_title, to_title)


def _recommendations_impl(
    concept_id: str, user_level: Optional[int], max_recommendations: Optional[int]
) -> Dict[str, Any]:
    concept_id = validate_string_param(concept_id, "concept_id")
    if user_level is not None:
        user_level = validate_int_param(user_level, "user_level", min_val=1, max_val=10)
    if max_recommendations is not None:
        max_recommendations = validate_int_param(
            max_recommendations, "max_recommendations", min_val=1, max_val=50
        )

    recommendations = initialize_engine().generate_recommendations(
        concept_id, user_level, max_recommendations
    )
    return {"concept_id": concept_id, "recommendations": recommendations}


@mcp.tool
def recommendations(
    concept_id: str,
    user_level: Optional[int] = None,
    max_recommendations: Optional[int] = None,
) -> Dict[str, Any]:
    """Recommend concepts to study next.

    Args:
        concept_id: ID of the current concept
        user_level: Learner difficulty level from 1 to 10
        max_recommendations: Maximum number of recommendations

    Returns:
        Dictionary with the ranked recommendations
    """
    return handle_mcp_errors(
        "Recommendations",
        _recommendations_impl,
        concept_id,
        user_level,
        max_recommendations,
    )


def _concept_network_impl(
    category_filter: str, connection_types: Optional[List[str]]
) -> Dict[str, Any]:
    category_filter = validate_string_param(category_filter, "category_filter")
    engine = initialize_engine()
    network = engine.build_concept_network(category_filter, connection_types)
    network["statistics"] = engine.calculate_network_statistics(
        network["nodes"], network["links"]
    )
    return network


@mcp.tool
def concept_network(
    category_filter: str = "all", connection_types: Optional[List[str]] = None
) -> Dict[str, Any]:
    """Get the concept network as nodes and links for visualization.

    Args:
        category_filter: Category to keep, or "all"
        connection_types: Allowed link types (prerequisite, application, related)

    Returns:
        Dictionary with nodes, links and statistics of the filtered view
    """
    return handle_mcp_errors(
        "Concept network", _concept_network_impl, category_filter, connection_types
    )


@mcp.tool
def network_statistics() -> Dict[str, Any]:
    """Get statistics of the whole concept network."""
    return handle_mcp_errors(
        "Network statistics",
        lambda: initialize_engine().calculate_network_statistics(),
    )


@mcp.tool
def export_network() -> Dict[str, Any]:
    """Export all nodes, edges and statistics of the concept network."""
    return handle_mcp_errors(
        "Network export", lambda: initialize_engine().export_network_data()
    )


@mcp.tool
def status() -> Dict[str, Any]:
    """Get server status, configuration and engine statistics."""
    engine = get_engine()
    result: Dict[str, Any] = {
        "mcp_server": {
            "name": "ConceptNetwork",
            "mcp_functions": [
                "search_concepts",
                "concept_details",
                "learning_path",
                "recommendations",
                "concept_network",
                "network_statistics",
                "export_network",
                "status",
            ],
        },
        "engine_initialized": engine is not None,
    }
    if engine is not None:
        result["engine"] = engine.get_stats()
        result["configuration"] = engine.config.get_config_summary()
    return result


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments for the MCP server."""
    parser = argparse.ArgumentParser(
        prog="conceptnetwork",
        description="Concept Network MCP Server - Learning paths over a math concept graph",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""Examples:
  # Start server with the bundled core concepts
  conceptnetwork

  # Start server with a custom concept database
  conceptnetwork --concepts-file ./concepts.json

Configuration priority: CLI arguments > Environment variables > Defaults
        """,
    )

    parser.add_argument(
        "--concepts-file",
        type=str,
        help="JSON concept database (overrides CONCEPTNETWORK_CONCEPTS_FILE)",
    )
    parser.add_argument(
        "--damping",
        type=float,
        help="PageRank damping factor (overrides CONCEPTNETWORK_DAMPING_FACTOR)",
    )
    parser.add_argument(
        "--iterations",
        type=int,
        help="PageRank iterations (overrides CONCEPTNETWORK_PAGERANK_ITERATIONS)",
    )
    parser.add_argument(
        "--strict-references",
        action="store_true",
        help="Fail on connections to unknown concepts instead of skipping them",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose logging (DEBUG level)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Minimize logging output (WARNING level only)",
    )

    return parser.parse_args(argv)


def args_to_config_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """Convert CLI arguments to configuration overrides dictionary."""
    overrides = {}

    if args.concepts_file:
        overrides["concepts_file"] = args.concepts_file
    if args.damping is not None:
        overrides["damping_factor"] = args.damping
    if args.iterations is not None:
        overrides["pagerank_iterations"] = args.iterations
    if args.strict_references:
        overrides["strict_references"] = True

    return overrides


def setup_logging(args: argparse.Namespace) -> None:
    """Setup logging level based on CLI arguments."""
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        force=True,
    )


def cleanup_handler(signum, frame):
    """Handle shutdown signals."""
    logger.info("Received shutdown signal, shutting down gracefully")
    sys.exit(0)


def main():
    """Main entry point for the MCP server."""
    signal.signal(signal.SIGINT, cleanup_handler)
    signal.signal(signal.SIGTERM, cleanup_handler)

    try:
        args = parse_args()
        setup_logging(args)

        logger.info("Starting Concept Network MCP Server...")

        config_overrides = args_to_config_overrides(args)
        if config_overrides:
            logger.info(
                f"Using CLI configuration overrides: {list(config_overrides.keys())}"
            )

        engine = initialize_engine(config_overrides)
        stats = engine.get_stats()
        logger.info(
            f"Loaded {stats['concepts']} concepts with {stats['edges']} connections"
        )

        logger.info("MCP server ready and listening for requests...")
        mcp.run()

    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
        cleanup_handler(signal.SIGINT, None)
    except Exception as e:
        logger.error(f"Server startup failed: {e}")
        raise


if __name__ == "__main__":
    main()
