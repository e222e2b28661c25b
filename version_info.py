"""Release metadata for relmeta itself.

Maintained by ``relmeta bump`` and the post-commit hook; edit ``stage`` and
feature notes by hand, leave the rest to the tool.
"""

RELEASE = {
    "version": {"major": 0, "minor": 3, "patch": 0},
    "stage": "beta",
    "build": 57,
    "release_date": "2026-10-12",
    "milestones": [
        {
            "version": "0.1.0",
            "date": "2026-08-03",
            "features": [
                "Version bump with build number from commit count",
                "Release date sync to today and to the last commit",
            ],
        },
        {
            "version": "0.2.0",
            "date": "2026-09-14",
            "features": [
                "Post-commit hook installer",
                "Exclusive lock around every record update",
            ],
        },
        {
            "version": "0.3.0",
            "date": "2026-10-12",
            "features": [
                "relmeta.toml configuration",
                "show command with development statistics",
                "--dry-run for every writing command",
            ],
        },
    ],
}
