from typing import Any, Optional, Sequence, Tuple

# (sql, bound args) - executed in order by DatabaseManager.run()
Statement = Tuple[str, Optional[Sequence[Any]]]
