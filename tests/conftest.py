"""
测试公共 fixture
"""

import pytest
from sqlalchemy import create_engine


@pytest.fixture
def sqlite_url(tmp_path):
    """带 test 表（3 行）的临时 SQLite 数据库 URL"""
    url = f"sqlite:///{tmp_path / 'test.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.exec_driver_sql(
            "CREATE TABLE test (id INTEGER PRIMARY KEY AUTOINCREMENT, foo VARCHAR(255) NOT NULL, data TEXT)"
        )
        conn.exec_driver_sql("INSERT INTO test (foo, data) VALUES ('test1', '\"3\"')")
        conn.exec_driver_sql("INSERT INTO test (foo, data) VALUES ('test2', NULL)")
        conn.exec_driver_sql("INSERT INTO test (foo, data) VALUES ('test3', 'x')")
    engine.dispose()
    return url
