"""Daily maintenance: python -m lockin.

Creates missing tables and resets streaks that lapsed overnight.
"""

from .database.db import init_db
from .gamification.engine import RewardEngine
from .settings import configure_logging


def main() -> None:
    configure_logging()
    init_db()
    reset = RewardEngine().sweep_lapsed_streaks()
    print(f"Lock In ready! {len(reset)} lapsed streak(s) reset.")


if __name__ == "__main__":
    main()
