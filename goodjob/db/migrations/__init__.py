"""
Database migrations, applied in list order by goodjob.db.migrate.

Each module exposes `up(db)`.
"""

MIGRATIONS = [
    "migration_2017_05_26_remove_null_estimated_hourly_wage_fields",
    "migration_2019_04_28_move_workings_email_to_user",
    "migration_2019_05_01_add_email_status_to_users",
    "migration_2019_07_02_add_missing_report_count",
    "migration_2019_11_28_update_user_name",
    "migration_2019_12_04_normalize_working_author",
    "migration_2019_12_13_add_estimated_monthly_wage",
]
