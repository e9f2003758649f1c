"""TableClient -- 后端表访问的薄封装

只提供通用的 select/insert/update/delete，过滤条件仅支持等值（eq）和集合成员（in_）。
应用运行时不拼接原始 SQL 语句以外的任何查询。
JSON 列与布尔列在此层透明编解码。
"""

import asyncio
import json
import re
from collections.abc import Iterable, Mapping, Sequence
from typing import Any, Protocol

import aiosqlite

from .exceptions import BackendError, BackendUnavailableError, ForeignKeyViolationError
from .sqlite_init import BOOL_COLUMNS, JSON_COLUMNS, TABLES

Row = dict[str, Any]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class TableClient(Protocol):
    """后端表访问接口"""

    async def select(
        self,
        table: str,
        *,
        columns: Sequence[str] | None = None,
        eq: Mapping[str, Any] | None = None,
        in_: Mapping[str, Iterable[Any]] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        """查询行"""
        ...

    async def insert(self, table: str, record: Mapping[str, Any]) -> Row:
        """插入一行并返回插入后的行"""
        ...

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        eq: Mapping[str, Any],
    ) -> list[Row]:
        """更新匹配行并返回更新后的行"""
        ...

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> int:
        """删除匹配行并返回删除数量"""
        ...


def _ident(name: str) -> str:
    """校验并引用标识符"""
    if not _IDENTIFIER.match(name):
        raise BackendError(f"非法标识符: {name!r}", recoverable=False)
    return f'"{name}"'


class SqliteTableClient:
    """TableClient 的 SQLite 实现

    每次写操作立即提交，语义与托管 Postgres 的 REST 接口一致（单语句事务）。
    所有 Repository 共用一个连接：execute 到 commit/rollback 在同一把锁内完成，
    一条语句的回滚不会波及其他协程尚未提交的写入。
    """

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn
        self._lock = asyncio.Lock()

    async def select(
        self,
        table: str,
        *,
        columns: Sequence[str] | None = None,
        eq: Mapping[str, Any] | None = None,
        in_: Mapping[str, Iterable[Any]] | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
    ) -> list[Row]:
        table_sql = self._table(table)
        cols_sql = ", ".join(_ident(c) for c in columns) if columns else "*"
        where_sql, params = self._where(table, eq, in_)
        sql = f"SELECT {cols_sql} FROM {table_sql}{where_sql}"
        if order_by:
            sql += f" ORDER BY {_ident(order_by)} {'DESC' if descending else 'ASC'}"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(int(limit))
        return await self._fetch(table, sql, params, commit=False)

    async def insert(self, table: str, record: Mapping[str, Any]) -> Row:
        table_sql = self._table(table)
        if not record:
            raise BackendError(f"{table} 插入记录为空", recoverable=False)
        names = list(record)
        cols_sql = ", ".join(_ident(n) for n in names)
        placeholders = ", ".join("?" for _ in names)
        params = [self._encode(table, n, record[n]) for n in names]
        sql = f"INSERT INTO {table_sql} ({cols_sql}) VALUES ({placeholders}) RETURNING *"
        rows = await self._fetch(table, sql, params, commit=True)
        return rows[0]

    async def update(
        self,
        table: str,
        values: Mapping[str, Any],
        *,
        eq: Mapping[str, Any],
    ) -> list[Row]:
        table_sql = self._table(table)
        if not values:
            return await self.select(table, eq=eq)
        if not eq:
            raise BackendError(f"{table} 更新缺少过滤条件", recoverable=False)
        set_sql = ", ".join(f"{_ident(n)} = ?" for n in values)
        params = [self._encode(table, n, v) for n, v in values.items()]
        where_sql, where_params = self._where(table, eq, None)
        sql = f"UPDATE {table_sql} SET {set_sql}{where_sql} RETURNING *"
        return await self._fetch(table, sql, params + where_params, commit=True)

    async def delete(self, table: str, *, eq: Mapping[str, Any]) -> int:
        table_sql = self._table(table)
        if not eq:
            raise BackendError(f"{table} 删除缺少过滤条件", recoverable=False)
        where_sql, params = self._where(table, eq, None)
        sql = f"DELETE FROM {table_sql}{where_sql} RETURNING id"
        rows = await self._fetch(table, sql, params, commit=True)
        return len(rows)

    # --- 内部工具 ---

    @staticmethod
    def _table(table: str) -> str:
        if table not in TABLES:
            raise BackendError(f"未知表: {table!r}", recoverable=False)
        return _ident(table)

    def _where(
        self,
        table: str,
        eq: Mapping[str, Any] | None,
        in_: Mapping[str, Iterable[Any]] | None,
    ) -> tuple[str, list[Any]]:
        clauses: list[str] = []
        params: list[Any] = []
        for name, value in (eq or {}).items():
            clauses.append(f"{_ident(name)} = ?")
            params.append(self._encode(table, name, value))
        for name, values in (in_ or {}).items():
            items = list(values)
            if not items:
                # 空集合：恒假
                clauses.append("0")
                continue
            clauses.append(f"{_ident(name)} IN ({', '.join('?' for _ in items)})")
            params.extend(self._encode(table, name, v) for v in items)
        if not clauses:
            return "", params
        return " WHERE " + " AND ".join(clauses), params

    @staticmethod
    def _encode(table: str, column: str, value: Any) -> Any:
        if value is None:
            return None
        if column in JSON_COLUMNS.get(table, ()):
            return json.dumps(value, ensure_ascii=False, default=str)
        if isinstance(value, bool):
            return int(value)
        if hasattr(value, "isoformat"):
            return value.isoformat()
        return value

    @staticmethod
    def _decode(table: str, row: Row) -> Row:
        json_cols = JSON_COLUMNS.get(table, frozenset())
        bool_cols = BOOL_COLUMNS.get(table, frozenset())
        result: Row = {}
        for name, value in row.items():
            if name in json_cols and isinstance(value, str):
                try:
                    value = json.loads(value)
                except ValueError:
                    # 保留原始文本，由上层行解析决定是否丢弃
                    pass
            elif name in bool_cols and value is not None:
                value = bool(value)
            result[name] = value
        return result

    async def _fetch(
        self,
        table: str,
        sql: str,
        params: list[Any],
        *,
        commit: bool,
    ) -> list[Row]:
        async with self._lock:
            return await self._fetch_locked(table, sql, params, commit=commit)

    async def _fetch_locked(
        self,
        table: str,
        sql: str,
        params: list[Any],
        *,
        commit: bool,
    ) -> list[Row]:
        try:
            cursor = await self._conn.execute(sql, params)
            raw_rows = await cursor.fetchall()
            names = [d[0] for d in cursor.description or ()]
            await cursor.close()
            if commit:
                await self._conn.commit()
        except aiosqlite.IntegrityError as e:
            await self._safe_rollback()
            if "FOREIGN KEY" in str(e).upper():
                raise ForeignKeyViolationError(table, e) from e
            raise BackendError(f"{table} 约束冲突: {e}") from e
        except aiosqlite.Error as e:
            await self._safe_rollback()
            raise BackendError(f"{table} 查询失败: {e}") from e
        except ValueError as e:
            # aiosqlite 在连接关闭后抛 ValueError("no active connection")
            raise BackendUnavailableError(e) from e
        return [self._decode(table, dict(zip(names, row, strict=False))) for row in raw_rows]

    async def _safe_rollback(self) -> None:
        try:
            await self._conn.rollback()
        except (aiosqlite.Error, ValueError):
            pass
