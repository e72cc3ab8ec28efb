"""Example showing how statements are translated and configured."""

from pathlib import Path

from cql_bridge.cache import StatementCache
from cql_bridge.config.config import load_config
from cql_bridge.processor import StatementProcessor
from cql_bridge.utils.logging import setup_logging


STATEMENTS = [
    "select tbl.key, tbl.bootstrapped from \"system\".\"local\" tbl",
    "-- set consistency_level=ONE; fetch_size=50\nselect * from events where day = '2024-01-01'",
    "-- set no_limit=true\nselect e.* from events e limit 20",
    "select a.id from a join b on a.id = b.id",
    "-- set consistency_level=LOCAL_SERIAL\nupdate accounts set balance = 10 where id = 1 if balance = 5",
    "CREATE TABLE t (k int PRIMARY KEY, v map<text, int>)",
]


def main():
    config_path = Path(__file__).parent.parent / "config" / "example_config.yaml"
    config = load_config(str(config_path))
    setup_logging(level="DEBUG")

    processor = StatementProcessor(StatementCache(config.driver.cql_cache_size))

    for text in STATEMENTS:
        parsed = processor.parse(config.driver, text)
        configuration = parsed.configuration
        print("=" * 80)
        print(text)
        print("->", parsed.cql)
        print(
            f"   {configuration.statement_type.value}, "
            f"consistency {configuration.consistency_level.value}, "
            f"fetch size {configuration.fetch_size}"
        )


if __name__ == "__main__":
    main()
