#!/usr/bin/env python3
"""
Demo script for NEON access.

This script runs a few read-only calls against the live NEON data portal
to show response caching, data query routing and tower resolution.
"""

import asyncio
import time

from neon_access.dto import DataQueryParams
from neon_access.errors import NeonApiError
from neon_access.repositories import HttpRequestExecutor, InMemoryCacheRepository
from neon_access.services import LocationResolver, NeonQueryPlanner


def print_section(title: str) -> None:
    """Print a section header."""
    print("\n" + "=" * 70)
    print(f"  {title}")
    print("=" * 70)


async def demo_cache(planner: NeonQueryPlanner) -> None:
    """Demonstrate response caching."""
    print_section("Response Caching")

    for attempt in ("cold", "warm"):
        start = time.time()
        site = await planner.get_site("SRER")
        duration = (time.time() - start) * 1000
        print(f"  {attempt:<5} get_site('SRER') -> {site.site_name} ({duration:.1f}ms)")

    stats = planner.cache_stats()
    print(f"\n  Entries: {stats['total_entries']}, hit rate: {stats['hit_rate']:.2%}")


async def demo_data_query(planner: NeonQueryPlanner) -> None:
    """Demonstrate GET/POST routing for data queries."""
    print_section("Data Query Routing")

    queries = [
        DataQueryParams(
            product_code="DP1.00001.001",
            site_code="SRER",
            start_date_month="2023-01",
            end_date_month="2023-03",
        ),
        DataQueryParams(
            product_code="DP1.00001.001",
            site_codes=["SRER", "JORN", "ONAQ"],
            start_date_month="2023-01",
            end_date_month="2023-03",
        ),
    ]

    for params in queries:
        descriptor = planner.plan_data_query(params)
        print(f"\n  Sites: {', '.join(params.requested_sites)} -> {descriptor.method}")
        try:
            result = await planner.query_data(params)
            print(f"  ✓ {len(result.site_codes)} site(s) in response")
        except NeonApiError as e:
            print(f"  ✗ {e.message}")


async def demo_towers(resolver: LocationResolver) -> None:
    """Demonstrate tower resolution at a site."""
    print_section("Tower Resolution")

    for site_code in ("SRER", "HARV"):
        towers = await resolver.find_towers(site_code)
        print(f"\n  {site_code}: {len(towers)} tower(s)")
        for tower in towers:
            print(f"    - {tower.location_name}: {tower.location_description}")


async def run() -> None:
    executor = HttpRequestExecutor.create()
    planner = NeonQueryPlanner.create(executor=executor, cache=InMemoryCacheRepository.create())
    resolver = LocationResolver.create(planner)

    try:
        await demo_cache(planner)
        await demo_data_query(planner)
        await demo_towers(resolver)
    finally:
        await executor.close()


def main() -> None:
    """Run all demos."""
    print("\n🚀 NEON Access Demo")
    print("=" * 70)

    try:
        asyncio.run(run())

        print("\n" + "=" * 70)
        print("✅ Demo completed successfully!")
        print("=" * 70)

    except NeonApiError as e:
        print(f"\n❌ Error: {e.message}")
        print("\nCheck network access to the NEON API, or set NEON_BASE_URL.")


if __name__ == "__main__":
    main()
