pytest_plugins = [
    "tests.fixtures.s3_fixtures",
    "tests.fixtures.app_fixtures",
]
