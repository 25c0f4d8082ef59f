"""Command-line interface for EthosRadar."""

import argparse
import json
import logging
import sys

from .core.config import settings
from .core.constants import FileConstants
from .core.errors import InsufficientDataError, UpstreamUnavailableError
from .core.scoring import load_weights, set_weights
from .services.r4r_analyzer import R4RAnalyzer
from .utils.data_prep import export_to_json, prepare_export, prepare_network_export

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_INSUFFICIENT_DATA = 1
EXIT_UPSTREAM_UNAVAILABLE = 2
EXIT_INVALID_INPUT = 3


def setup_logging():
    """Setup logging configuration."""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=FileConstants.LOG_FORMAT
    )


def build_analyzer() -> R4RAnalyzer:
    return R4RAnalyzer()


def cmd_analyze(args) -> int:
    """Analyze command."""
    analysis = build_analyzer().analyze_user(args.userkey)

    if args.out:
        export_to_json(prepare_export(analysis), args.out)
        print(f"Results exported to {args.out}")

    print(f"\nR4R Analysis for '{analysis.userkey}':")
    print(f"Reviews given/received: {analysis.total_reviews_given}/{analysis.total_reviews_received}")
    print(f"Reciprocal pairs: {analysis.reciprocal_reviews} "
          f"({analysis.quick_reciprocal_count} quick, {analysis.reciprocal_percentage:.1f}%)")
    print(f"R4R score: {analysis.r4r_score:.1f} ({analysis.risk_level.value} risk)")

    if analysis.network_connections:
        print("\nTop connections:")
        for i, conn in enumerate(analysis.network_connections[:5], 1):
            name = conn.display_name or conn.userkey
            print(f"  {i}. {name}: {conn.suspicious_score:.0f}% risk ({conn.reciprocal_pairs} reciprocal)")

    if analysis.high_r4r_reviewers:
        print("\nHigh R4R reviewers:")
        for reviewer in analysis.high_r4r_reviewers:
            name = reviewer.display_name or reviewer.userkey
            print(f"  - {name}: {reviewer.r4r_score:.0f}% ({reviewer.risk_level.value})")
    return EXIT_OK


def cmd_summary(args) -> int:
    """Summary command."""
    summary = build_analyzer().get_summary(args.userkey)
    if not summary.available:
        print(f"Analysis unavailable for '{args.userkey}': insufficient review data")
        return EXIT_INSUFFICIENT_DATA
    print(json.dumps(summary.to_dict(), indent=2))
    return EXIT_OK


def cmd_network(args) -> int:
    """Network command."""
    result = build_analyzer().analyze_network(args.userkeys)

    if args.out:
        export_to_json(prepare_network_export(result), args.out)
        print(f"Results exported to {args.out}")

    print(f"Analyzed {len(result.analyses)} users "
          f"({len(result.unavailable)} without data)")
    for conn in result.cross_connections:
        arrow = "<->" if conn.is_mutual else "->"
        print(f"  {conn.user1} {arrow} {conn.user2}: {conn.suspicious_score:.0f}% risk")
    print(f"Network suspicious score: {result.network_suspicious_score:.1f}")
    return EXIT_OK


def cmd_serve(args) -> int:
    """Serve command."""
    import uvicorn

    print(f"Starting EthosRadar API on {args.host}:{args.port}...")
    uvicorn.run("ethosradar.api.app:create_app", factory=True,
                host=args.host, port=args.port, log_level=settings.log_level.lower())
    return EXIT_OK


def main(argv=None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(description="EthosRadar - Review-for-review farming detection")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    # Analyze command
    analyze_parser = subparsers.add_parser('analyze', help='Analyze a userkey for R4R patterns')
    analyze_parser.add_argument('userkey', help='Ethos userkey (e.g. profileId:123)')
    analyze_parser.add_argument('--out', help='Output JSON file')

    # Summary command
    summary_parser = subparsers.add_parser('summary', help='Print a compact summary')
    summary_parser.add_argument('userkey', help='Ethos userkey')

    # Network command
    network_parser = subparsers.add_parser('network', help='Find R4R links between users')
    network_parser.add_argument('userkeys', nargs='+', help='Ethos userkeys')
    network_parser.add_argument('--out', help='Output JSON file')

    # Serve command
    serve_parser = subparsers.add_parser('serve', help='Run the HTTP API')
    serve_parser.add_argument('--host', default=settings.host, help='Bind host')
    serve_parser.add_argument('--port', type=int, default=settings.port, help='Bind port')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_OK

    setup_logging()
    set_weights(load_weights(settings.weights_file))

    commands = {
        'analyze': cmd_analyze,
        'summary': cmd_summary,
        'network': cmd_network,
        'serve': cmd_serve,
    }
    try:
        return commands[args.command](args)
    except InsufficientDataError as e:
        print(f"Analysis unavailable: {e}")
        return EXIT_INSUFFICIENT_DATA
    except UpstreamUnavailableError as e:
        logger.error(f"Review data source unavailable: {e}")
        return EXIT_UPSTREAM_UNAVAILABLE
    except ValueError as e:
        print(f"Invalid input: {e}")
        return EXIT_INVALID_INPUT
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
