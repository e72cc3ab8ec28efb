"""sqlglot dialect used to generate rewritten SELECT text."""

from sqlglot import exp
from sqlglot.dialects.postgres import Postgres

__all__ = ("Cql",)


class Cql(Postgres):
    """Postgres output with the operators the native language accepts."""

    class Generator(Postgres.Generator):
        TRANSFORMS = {
            **Postgres.Generator.TRANSFORMS,
            exp.NEQ: lambda self, e: self.binary(e, "!="),
        }
