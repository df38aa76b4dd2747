"""
SQL routines installed next to the row level security policies.

Routines declared ``SECURITY DEFINER`` run with the privileges of their owner
and bypass the policies they help enforce. Such a routine must resolve every
unqualified name against a fixed namespace, otherwise a caller able to create
a same-named object earlier on the search path (a shadow ``user_role`` table,
say) could make ``has_role`` answer whatever it likes. ``SqlRoutine.render``
refuses to produce DDL for an elevated routine without a pinned search path,
and the test suite renders every routine declared here.
"""

import re
from typing import List, Optional

from eventquiz_backend.database import PRINCIPAL_SETTING


class NamespaceResolutionError(Exception):
    """An elevated privilege routine does not pin its name resolution."""


_UNSAFE_PATH_ENTRY = re.compile(r'^\s*("?\$user"?|pg_temp)\s*$')


class SqlRoutine:

    def __init__(
        self,
        name: str,
        arguments: str,
        returns: str,
        language: str,
        body: str,
        volatility: Optional[str] = None,
        security_definer: bool = False,
        search_path: Optional[str] = None,
    ):
        self.name = name
        self.arguments = arguments
        self.returns = returns
        self.language = language
        self.body = body
        self.volatility = volatility
        self.security_definer = security_definer
        self.search_path = search_path

    @property
    def qualified_name(self) -> str:
        return f"public.{self.name}"

    def validate(self):
        if not self.security_definer:
            return
        if self.search_path is None:
            raise NamespaceResolutionError(
                f"{self.qualified_name} is SECURITY DEFINER without SET search_path"
            )
        for entry in self.search_path.split(","):
            if entry.strip() and _UNSAFE_PATH_ENTRY.match(entry):
                raise NamespaceResolutionError(
                    f"{self.qualified_name} resolves names through caller controlled schema {entry.strip()}"
                )

    def render(self) -> str:
        self.validate()
        options: List[str] = [f"LANGUAGE {self.language}"]
        if self.volatility:
            options.append(self.volatility)
        if self.security_definer:
            options.append("SECURITY DEFINER")
        if self.search_path is not None:
            path = self.search_path if self.search_path.strip() else "''"
            options.append(f"SET search_path = {path}")
        option_sql = "\n".join(options)
        return (
            f"CREATE OR REPLACE FUNCTION {self.qualified_name}({self.arguments})\n"
            f"RETURNS {self.returns}\n"
            f"{option_sql}\n"
            f"AS $function$\n{self.body.strip()}\n$function$;"
        )

    def render_drop(self) -> str:
        return f"DROP FUNCTION IF EXISTS {self.qualified_name}({self.arguments}) CASCADE;"


class SqlTrigger:

    def __init__(self, name: str, table: str, timing: str, event: str, routine: SqlRoutine):
        self.name = name
        self.table = table
        self.timing = timing
        self.event = event
        self.routine = routine

    def render(self) -> str:
        return (
            f"CREATE TRIGGER {self.name}\n"
            f"{self.timing} {self.event} ON public.\"{self.table}\"\n"
            f"FOR EACH ROW EXECUTE FUNCTION {self.routine.qualified_name}();"
        )

    def render_drop(self) -> str:
        return f"DROP TRIGGER IF EXISTS {self.name} ON public.\"{self.table}\";"


current_principal_id = SqlRoutine(
    name="current_principal_id",
    arguments="",
    returns="text",
    language="sql",
    volatility="STABLE",
    search_path="",
    body=f"SELECT nullif(current_setting('{PRINCIPAL_SETTING}', true), '')",
)

has_role = SqlRoutine(
    name="has_role",
    arguments="_user_id text, _role public.app_role",
    returns="boolean",
    language="sql",
    volatility="STABLE",
    security_definer=True,
    search_path="",
    body="""
SELECT EXISTS (
  SELECT 1
  FROM public.user_role
  WHERE user_id = _user_id
    AND role = _role
)
""",
)

handle_new_user = SqlRoutine(
    name="handle_new_user",
    arguments="",
    returns="trigger",
    language="plpgsql",
    security_definer=True,
    search_path="",
    body="""
BEGIN
  INSERT INTO public.profile (id, user_id, display_name, email)
  VALUES (
    gen_random_uuid()::text,
    NEW.id,
    COALESCE(NEW.user_metadata ->> 'display_name', NEW.email),
    NEW.email
  );
  RETURN NEW;
END;
""",
)

update_updated_at_column = SqlRoutine(
    name="update_updated_at_column",
    arguments="",
    returns="trigger",
    language="plpgsql",
    search_path="",
    body="""
BEGIN
  NEW.updated_at = now();
  RETURN NEW;
END;
""",
)

ROUTINES: List[SqlRoutine] = [
    current_principal_id,
    has_role,
    handle_new_user,
    update_updated_at_column,
]

TRIGGERS: List[SqlTrigger] = [
    SqlTrigger("on_user_created", "user", "AFTER", "INSERT", handle_new_user),
] + [
    SqlTrigger(f"update_{table}_updated_at", table, "BEFORE", "UPDATE", update_updated_at_column)
    for table in ("profile", "quiz", "question", "leaderboard_entry")
]


def render_routines() -> List[str]:
    return [routine.render() for routine in ROUTINES]


def render_triggers() -> List[str]:
    return [trigger.render() for trigger in TRIGGERS]
