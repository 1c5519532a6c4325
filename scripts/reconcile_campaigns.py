#!/usr/bin/env python3
"""
Run the campaign-total reconciliation pass.

Recomputes every campaign's total from its completed donations, reports the
drift, and (unless --dry-run) overwrites drifted totals in one transaction.

Usage:
  python3 scripts/reconcile_campaigns.py [--config PATH] [--campaign-id UUID] [--dry-run]
"""

import argparse
import sys
from pathlib import Path
from uuid import UUID

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Reconcile campaign totals with completed donations")
    p.add_argument("--config", default=None, help="Configuration YAML (default: DONATION_CONFIG or bundled default)")
    p.add_argument("--campaign-id", type=UUID, default=None, help="Reconcile a single campaign")
    p.add_argument("--dry-run", action="store_true", help="Report drift, roll back corrections")
    return p.parse_args(argv)


def main(argv=None) -> int:
    args = _parse_args(argv)

    from donation_config import get_active_config
    from donation_config.bridges import (
        build_ledger_policy,
        configure_logging_from_config,
        init_engine_from_config,
    )
    from donation_kernel.db.engine import get_session
    from donation_kernel.exceptions import CampaignNotFoundError
    from donation_kernel.services import LedgerReconciler

    config = get_active_config(args.config)
    configure_logging_from_config(config)
    init_engine_from_config(config)

    session = get_session()
    try:
        ledger = LedgerReconciler(session, policy=build_ledger_policy(config))
        if args.campaign_id is not None:
            reports = [ledger.reconcile_campaign(args.campaign_id)]
        else:
            reports = ledger.reconcile_all()

        if args.dry_run:
            session.rollback()
        else:
            session.commit()
    except CampaignNotFoundError as exc:
        session.rollback()
        print(f"  ERROR: {exc}", file=sys.stderr)
        return 1
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()

    print()
    print(f"  {'CAMPAIGN':<38} {'RECORDED':>12} {'EXPECTED':>12} {'DRIFT':>10}")
    for r in reports:
        marker = "" if r.is_consistent else ("  (rolled back)" if args.dry_run else "  corrected")
        print(f"  {str(r.campaign_id):<38} {r.recorded_amount:>12} {r.expected_amount:>12} {r.drift:>10}{marker}")
    drifted = sum(1 for r in reports if not r.is_consistent)
    print()
    print(f"  {len(reports)} campaign(s) checked, {drifted} drifted.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
