"""Sub-community hierarchy migration — backfills level/path on legacy communities.

Invariants:
    - Communities with NULL level or NULL/empty path become top-level:
      level 0, path "/{id}/", parent_community_id NULL
    - One transaction for the whole run; --dry-run rolls it back
    - Membership and admin row counts must match before and after
    - Exit code 0 on success, 1 otherwise

Usage:
    python -m app.scripts.migrate_sub_communities [--dry-run] [--verbose] [--batch-size N]
"""

import asyncio
import json
import logging
import sys

import click
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.core.community_paths import needs_normalization, root_path
from app.infrastructure import database
from app.infrastructure.observability import setup_logging
from app.models.community import Community, CommunityAdmin, UserCommunity

logger = logging.getLogger(__name__)


async def _count(db: AsyncSession, model) -> int:
    return await db.scalar(select(func.count()).select_from(model)) or 0


async def migrate(
    db: AsyncSession, *, dry_run: bool = False, batch_size: int = 100, verbose: bool = False,
) -> dict:
    """Normalize legacy communities and validate the result. Never commits."""
    errors: list[dict] = []
    memberships_before = await _count(db, UserCommunity)
    admins_before = await _count(db, CommunityAdmin)

    communities = list((await db.execute(
        select(Community).order_by(Community.created_at),
    )).scalars().all())
    pending = [c for c in communities if needs_normalization(c.level, c.path)]
    total = len(communities)

    updated = 0
    for start in range(0, len(pending), batch_size):
        batch = pending[start:start + batch_size]
        for community in batch:
            community.level = 0
            community.path = root_path(community.id)
            community.parent_community_id = None
            updated += 1
            if verbose:
                logger.info(f"Normalized community {community.name} ({community.id})",
                            extra={"community_id": community.id})
        await db.flush()
        logger.info(f"Processed batch {start // batch_size + 1} ({len(batch)} communities)")

    top_level = sum(1 for c in communities if c.parent_community_id is None)
    remaining = sum(1 for c in communities if needs_normalization(c.level, c.path))
    memberships_after = await _count(db, UserCommunity)
    admins_after = await _count(db, CommunityAdmin)

    if remaining:
        errors.append({"check": "paths", "message": f"{remaining} communities still without a path"})
    if memberships_after != memberships_before:
        errors.append({
            "check": "memberships",
            "message": f"membership rows changed: {memberships_before} -> {memberships_after}",
        })
    if admins_after != admins_before:
        errors.append({
            "check": "admins",
            "message": f"admin rows changed: {admins_before} -> {admins_after}",
        })

    return {
        "success": not errors,
        "dry_run": dry_run,
        "summary": {
            "communities_checked": total,
            "communities_updated": updated,
            "already_migrated": total - len(pending),
            "top_level": top_level,
            "sub_communities": total - top_level,
            "memberships": memberships_after,
            "admin_relationships": admins_after,
        },
        "errors": errors,
    }


async def _run(dry_run: bool, batch_size: int, verbose: bool) -> dict:
    settings = get_settings()
    manager = database.init_db(settings.database_url)
    try:
        async with manager.session() as db:
            report = await migrate(db, dry_run=dry_run, batch_size=batch_size, verbose=verbose)
            if dry_run or not report["success"]:
                await db.rollback()
            else:
                await db.commit()
        return report
    finally:
        await manager.dispose()


@click.command()
@click.option("--dry-run", is_flag=True, default=False, help="Roll back instead of committing.")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Log every updated community.")
@click.option("--batch-size", type=click.IntRange(min=1), default=100, show_default=True,
              help="Communities updated per flush.")
def main(dry_run: bool, verbose: bool, batch_size: int):
    """Backfill sub-community hierarchy fields on existing communities."""
    settings = get_settings()
    setup_logging("DEBUG" if verbose else settings.log_level, "text")
    report = asyncio.run(_run(dry_run, batch_size, verbose))
    click.echo(json.dumps(report, indent=2))
    sys.exit(0 if report["success"] else 1)


if __name__ == "__main__":
    main()
