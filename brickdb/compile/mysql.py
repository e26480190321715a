"""MySQL dialect compiler."""

from __future__ import annotations

from brickdb.compile.base import SQLCompiler
from brickdb.schema.dialect import Dialect


class MySQLCompiler(SQLCompiler):
    """Compiles statements for MySQL / MariaDB.

    MySQL is the base behaviour of :class:`SQLCompiler`: ``LIMIT n [OFFSET o]``
    suffixes, ``DELETE a FROM a JOIN b …`` for joined deletes and
    ``SHOW … TABLES`` / ``SHOW COLUMNS`` for introspection.

    ``PyMySQL`` reports ``cursor.lastrowid`` after a text INSERT, so the last
    insert id is taken straight from the result.
    """

    dialect = Dialect.MYSQL
    supports_last_insert_id = True
    column_name_field = "Field"
