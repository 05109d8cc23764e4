"""Command line entry point for the gamification engine"""
import argparse
import asyncio
import logging
from typing import List, Optional

from expense_gamification.config import Settings
from expense_gamification.gamification.achievement_system import format_achievement_unlock_message
from expense_gamification.gamification.streak_system import format_streak_display
from expense_gamification.services.container import init_container

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Expense tracking gamification")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("record", help="Record one tracked expense")
    subparsers.add_parser("profile", help="Show level, points and streak")
    subparsers.add_parser("achievements", help="List achievements with progress")
    subparsers.add_parser("reset", help="Reset the gamification profile")

    budget = subparsers.add_parser("budget", help="Classify spending against a budget")
    budget.add_argument("limit", help="Monthly budget limit")
    budget.add_argument("spending", help="Amount spent so far")

    allocation = subparsers.add_parser("allocation", help="Income allocation vs the 70-20-10 rule")
    allocation.add_argument("income")
    allocation.add_argument("essentials")
    allocation.add_argument("savings")
    allocation.add_argument("discretionary")

    return parser


async def run(args: argparse.Namespace, settings: Settings) -> None:
    container = await init_container(settings)
    service = container.gamification_service

    try:
        if args.command == "record":
            unlocked = await service.record_activity()
            profile = await service.get_profile()
            print(f"✅ Expense tracked! Level {profile.level} - {profile.experience_points}/"
                  f"{profile.experience_to_next_level} XP")
            print(format_streak_display(profile))
            for entry in unlocked:
                print()
                print(format_achievement_unlock_message(entry))

        elif args.command == "profile":
            profile = await service.get_profile()
            progress = await service.get_level_progress()
            print(f"⭐ Level {profile.level} ({progress['progress'] * 100:.0f}% to next level)")
            print(f"💰 Total points: {profile.total_points}")
            print(f"📝 Expenses tracked: {profile.total_activities_tracked}")
            print(format_streak_display(profile))
            print(await service.get_motivational_message())

        elif args.command == "achievements":
            for status in await service.get_achievements():
                mark = "✅" if status.is_unlocked else "🔒"
                a = status.achievement
                print(f"{mark} {a.icon} {a.name} (+{a.points_reward} XP) - {a.description} "
                      f"[{status.progress.description}]")

        elif args.command == "reset":
            await service.reset_profile()
            print("Profile reset")

        elif args.command == "budget":
            status = service.calculate_budget_status(args.limit, args.spending)
            print(f"{status.message} ({status.percentage_used:.1f}% used, {status.remaining_budget} left)")

        elif args.command == "allocation":
            progress = service.calculate_allocation_progress(
                args.income, args.essentials, args.savings, args.discretionary
            )
            print(progress.message)

    finally:
        await container.close()


def main(argv: Optional[List[str]] = None) -> None:
    """Main application entry point"""
    args = build_parser().parse_args(argv)
    settings = Settings()

    # Configure logging
    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=getattr(logging, settings.log_level)
    )

    asyncio.run(run(args, settings))


if __name__ == "__main__":
    main()
