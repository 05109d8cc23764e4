"""
Gamification constants

Point values, streak milestones and achievement thresholds shared by the
level, streak and achievement engines.
"""

# Storage key for the single gamification profile
PROFILE_STORAGE_KEY = "gamification_profile"

DEFAULT_USER_ID = "default-user"

# Points
ADD_EXPENSE_POINTS = 10
WEEKLY_STREAK_POINTS = 50
MONTHLY_STREAK_POINTS = 200

# Leveling: threshold for the next level is level * XP_PER_LEVEL
XP_PER_LEVEL = 100

# Streak milestones (days)
WEEKLY_STREAK_DAYS = 7
MONTHLY_STREAK_DAYS = 30
LEGENDARY_STREAK_DAYS = 100

# Achievement ids
FIRST_EXPENSE = "first_expense"
EXPENSE_NOVICE = "expense_novice"
EXPENSE_TRACKER = "expense_tracker"
EXPENSE_MASTER = "expense_master"
WEEK_STREAK = "week_streak"
MONTH_STREAK = "month_streak"
STREAK_LEGEND = "streak_legend"
LEVEL_5 = "level_5"
LEVEL_10 = "level_10"
LEVEL_25 = "level_25"
POINT_COLLECTOR = "point_collector"
POINT_HOARDER = "point_hoarder"

# Activity thresholds
EXPENSES_FIRST = 1
EXPENSES_NOVICE = 10
EXPENSES_TRACKER = 50
EXPENSES_MASTER = 100

# Level thresholds
LEVEL_RISING_STAR = 5
LEVEL_SKILLED_TRACKER = 10
LEVEL_FINANCE_GURU = 25

# Lifetime point thresholds
POINTS_COLLECTOR = 1000
POINTS_HOARDER = 5000

# 70-20-10 income allocation rule
ESSENTIALS_SHARE = "0.70"
SAVINGS_SHARE = "0.20"
DISCRETIONARY_SHARE = "0.10"
