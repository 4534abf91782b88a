"""
Unit tests for placeholder rewriting and named parameter binding.
"""
import pytest
from sqlrecord.bind import BindType, bind_named, bind_type, rebind
from sqlrecord.exceptions import BindError

from tests.fixtures.records import Person, PlainPerson


@pytest.mark.parametrize(('driver', 'expected'), [
    ('sqlite', BindType.QUESTION),
    ('SQLite', BindType.QUESTION),
    ('postgresql', BindType.FORMAT),
    ('pgx', BindType.DOLLAR),
    ('oracle', BindType.NAMED),
    ('mssql', BindType.UNKNOWN),
    (None, BindType.UNKNOWN),
])
def test_bind_type(driver, expected):
    assert bind_type(driver) is expected


class TestRebind:

    def test_question_unchanged(self):
        sql = 'select * from t where a = ?'
        assert rebind(BindType.QUESTION, sql) == sql

    def test_dollar(self):
        assert rebind(BindType.DOLLAR, 'a = ? and b = ?') == 'a = $1 and b = $2'

    def test_named(self):
        assert rebind(BindType.NAMED, 'a = ? and b = ?') == 'a = :arg1 and b = :arg2'

    def test_format_escapes_percent(self):
        sql = "select * from t where name like 'A%' and id = ?"
        assert rebind(BindType.FORMAT, sql) == "select * from t where name like 'A%%' and id = %s"

    def test_format_without_placeholders_left_alone(self):
        sql = "select * from t where name like 'A%'"
        assert rebind(BindType.FORMAT, sql) == sql

    def test_question_mark_inside_literal(self):
        assert rebind(BindType.DOLLAR, "select 'why?' where a = ?") == "select 'why?' where a = $1"

    def test_cast_untouched(self):
        assert rebind(BindType.DOLLAR, 'select ?::int') == 'select $1::int'


class TestBindNamed:

    def test_mapping(self):
        sql, args = bind_named(BindType.FORMAT, 'select * from t where a = :a and b = :b', {'a': 1, 'b': 'x'})
        assert sql == 'select * from t where a = %s and b = %s'
        assert args == [1, 'x']

    def test_record(self):
        sql, args = bind_named(BindType.DOLLAR, 'insert into person values (:id, :name)', Person(ID=9, Name='Ida'))
        assert sql == 'insert into person values ($1, $2)'
        assert args == [9, 'Ida']

    def test_repeated_name_bound_twice(self):
        sql, args = bind_named(BindType.QUESTION, 'select :a, :a', {'a': 5})
        assert sql == 'select ?, ?'
        assert args == [5, 5]

    def test_casts_and_literals_ignored(self):
        sql, args = bind_named(BindType.QUESTION, "select ':skip', :v::text", {'v': 1})
        assert sql == "select ':skip', ?::text"
        assert args == [1]

    def test_missing_mapping_key(self):
        with pytest.raises(BindError, match="'b'"):
            bind_named(BindType.QUESTION, 'select :a, :b', {'a': 1})

    def test_missing_record_field(self):
        with pytest.raises(BindError, match="'email'"):
            bind_named(BindType.QUESTION, 'select :email', Person())

    def test_unsupported_argument(self):
        with pytest.raises(BindError):
            bind_named(BindType.QUESTION, 'select :a', PlainPerson())
