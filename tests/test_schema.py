"""The DDL must carry every constraint the handlers (and the in-memory fake) rely on."""

import re
import unittest

from fakes import UNIQUE

from localhub.account_deletion import models as account_deletion_models
from localhub.admin import models as admin_models
from localhub.auth import models as auth_models
from localhub.businesses import models as businesses_models
from localhub.feed import models as feed_models
from localhub.jobs import models as jobs_models
from localhub.messaging import models as messaging_models
from localhub.moderation import models as moderation_models

MODEL_MODULES = (
    account_deletion_models,
    admin_models,
    auth_models,
    businesses_models,
    feed_models,
    jobs_models,
    messaging_models,
    moderation_models,
)


def table_ddl() -> dict[str, str]:
    ddl = {}
    for module in MODEL_MODULES:
        for name, value in vars(module).items():
            if not name.endswith("_sql") or not isinstance(value, str):
                continue
            for match in re.finditer(r"CREATE TABLE (\w+) \(", value):
                ddl[match.group(1)] = value
    return ddl


class TestUniqueConstraints(unittest.TestCase):
    def test_every_unique_key_is_declared(self) -> None:
        ddl = table_ddl()
        for table, keys in UNIQUE.items():
            self.assertIn(table, ddl)
            for columns in keys:
                if len(columns) == 1:
                    pattern = rf"\b{columns[0]}\b[^,\n]*UNIQUE"
                    self.assertRegex(ddl[table], pattern, f"{table}.{columns[0]}")
                else:
                    self.assertIn(f"UNIQUE ({', '.join(columns)})", ddl[table])

    def test_conversation_participants_are_ordered(self) -> None:
        self.assertIn(
            "CHECK (participant_one < participant_two)", messaging_models.conversations_sql
        )


if __name__ == "__main__":
    unittest.main()
