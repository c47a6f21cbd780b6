import asyncio
import argparse
import json
import logging
from collections import defaultdict

from core.config import load_settings
from core.engine import EnrichmentOrchestrator
from core.errors import ConfigurationError, InvalidDomainError, SignatureRegistryError
from models.enrichment import EnrichmentOptions, PreferredSource
from rules.rules_loader import get_signature_registry

def _truncate_value(value: str, max_length: int = 200) -> str:
    """Truncate a string to max_length, adding ellipsis if truncated."""
    if not value:
        return value
    if len(value) <= max_length:
        return value
    return value[:max_length] + "..."

def _serialize_detection(d, value_max_length: int = 200):
    return {
        "name": d.name,
        "category": d.category,
        "version": d.version,
        "evidence": {
            "type": d.evidence.type,
            "name": d.evidence.name,
            "value": _truncate_value(d.evidence.value, value_max_length),
            "pattern": d.evidence.pattern,
        },
    }

def _print_signatures():
    by_category = defaultdict(list)
    for signature in get_signature_registry():
        by_category[signature.category].append(signature.name)
    print("Available signatures:")
    for category in sorted(by_category):
        print(f"\n{category} ({len(by_category[category])}):")
        for name in by_category[category]:
            print(f"  - {name}")

def main():
    parser = argparse.ArgumentParser(description="Domain enrichment and lead scoring CLI")
    parser.add_argument("domain", nargs="?", help="Target domain (e.g., example.com)")
    parser.add_argument("--preferred-source", type=str, default="both", choices=[s.value for s in PreferredSource], help="Contact providers to query (default: both)")
    parser.add_argument("--max-emails", type=int, help="Maximum contacts to collect (default: DEFAULT_MAX_EMAILS or 5)")
    parser.add_argument("--skip-registration", action="store_true", help="Skip the WHOIS registration lookup")
    parser.add_argument("--skip-tech-stack", action="store_true", help="Skip technology detection")
    parser.add_argument("--skip-contacts", action="store_true", help="Skip contact discovery")
    parser.add_argument("--scoring-config", type=str, help="YAML file with scoring weight overrides")
    parser.add_argument("--show-evidence", action="store_true", help="Include the detection evidence trail in the output")
    parser.add_argument("--value-max-length", type=int, default=200, help="Maximum length for evidence values (default: 200, use 0 for unlimited)")
    parser.add_argument("--verify-email", type=str, metavar="EMAIL", help="Verify a single email address and exit")
    parser.add_argument("--list-signatures", action="store_true", help="List all technology signatures and exit")
    parser.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging verbosity level (default: INFO)")
    args = parser.parse_args()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, args.log_level),
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    logger = logging.getLogger(__name__)

    try:
        if args.list_signatures:
            _print_signatures()
            return
        settings = load_settings(scoring_config_file=args.scoring_config)
    except (ConfigurationError, SignatureRegistryError) as e:
        logger.error(str(e))
        raise SystemExit(2)

    if not args.domain and not args.verify_email:
        parser.error("domain is required unless using --verify-email or --list-signatures")
    if args.max_emails is not None and args.max_emails < 0:
        parser.error("--max-emails must not be negative")

    async def run():
        orchestrator = EnrichmentOrchestrator.from_settings(settings)
        logger.info("Initialized enrichment engine")

        if args.verify_email:
            verification = await orchestrator.verify_email(args.verify_email)
            print(json.dumps(verification.to_dict(), indent=2))
            return

        options = EnrichmentOptions(
            skip_registration=args.skip_registration,
            skip_tech_stack=args.skip_tech_stack,
            skip_contacts=args.skip_contacts,
            preferred_source=PreferredSource(args.preferred_source),
            max_emails=args.max_emails,
        )
        result = await orchestrator.enrich(args.domain, options)
        output = result.to_dict()
        if args.show_evidence and result.tech_stack:
            # Use unlimited length if value_max_length is 0
            max_len = None if args.value_max_length == 0 else args.value_max_length
            output["evidence"] = [_serialize_detection(d, max_len or 999999) for d in result.tech_stack.detections]
        print(json.dumps(output, indent=2))

    try:
        asyncio.run(run())
    except InvalidDomainError as e:
        logger.error(str(e))
        raise SystemExit(2)

if __name__ == "__main__":
    main()
