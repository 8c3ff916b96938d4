# scripts/check_sources.py
"""Run one health probe pass against every configured source"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

sys.path.append(str(Path(__file__).parent.parent))

from app.config.sources import load_source_catalog  # noqa: E402
from app.core.hub import create_default_hub  # noqa: E402

async def main():
    """Probe every registered source and print its resulting state"""
    print("🔍 Checking configured sources...\n")

    hub = create_default_hub()
    registered = {source.id for source in hub.registry.snapshot()}
    skipped = [source.id for source in load_source_catalog() if source.id not in registered]

    try:
        outcome = await hub.monitor.run_once()
    finally:
        await hub.shutdown()

    print("📊 Probe Results:\n")
    for source in hub.registry.snapshot():
        status = "✅" if outcome.get(source.id) else "❌"
        print(
            f"{status} {source.name} ({source.id}): {source.health_status.value}, "
            f"reliability {source.reliability}, {source.response_time:.0f}ms"
        )

    if skipped:
        print(f"\n⏭️  Not registered (no adapter or missing credentials): {', '.join(skipped)}")

    health = hub.get_system_health()
    print(f"\n🩺 System status: {health.status} ({health.active_sources}/{health.total_sources} active)")

    if not all(outcome.values()):
        print("\n💡 Troubleshooting tips:")
        print("- Check TMDB_API_KEY in your .env file")
        print("- Verify network connectivity to the providers")
        sys.exit(1)

if __name__ == "__main__":
    asyncio.run(main())
