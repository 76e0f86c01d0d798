from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import patch

import pytest

from product_variations import statements
from product_variations.errors import FieldValidationError, RequestShapeError
from product_variations.statements import (
    build_insert_statement,
    build_statement,
    build_statements,
    build_update_statement,
    iso_timestamp,
    parameters_to_values,
)

TABLE = 'wordpress_product_variations'
NOW = '2024-05-01T12:30:45.123Z'


def test_iso_timestamp_format():
    moment = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)

    assert iso_timestamp(moment) == '2024-05-01T12:30:45.123Z'


def test_iso_timestamp_converts_to_utc():
    moment = datetime(2024, 5, 1, 14, 30, 45, tzinfo=timezone(timedelta(hours=2)))

    assert iso_timestamp(moment) == '2024-05-01T12:30:45.000Z'


def test_insert_statement(make_variation):
    statement = build_insert_statement(make_variation(price=Decimal('19.99')), TABLE, NOW)

    assert statement['Statement'] == (
        'INSERT INTO "wordpress_product_variations" VALUE {'
        "'id': ?, 'sku': ?, 'permalink': ?, 'price': ?, 'quantity': ?, 'size': ?, "
        "'date_created_gmt': ?, 'date_modified_gmt': ?}"
    )
    assert statement['Parameters'] == [
        {'S': '1042'},
        {'S': 'TSHIRT-RED-M'},
        {'S': 'https://shop.example.com/product/t-shirt/?attribute_size=m'},
        {'N': '19.99'},
        {'N': '12'},
        {'S': 'M'},
        {'S': NOW},
        {'S': NOW},
    ]


def test_insert_placeholders_match_parameters(make_variation):
    statement = build_insert_statement(make_variation(), TABLE, NOW)

    assert statement['Statement'].count('?') == len(statement['Parameters'])


def test_update_statement(make_variation):
    statement = build_update_statement(make_variation(quantity=0), TABLE, NOW)

    assert statement['Statement'] == (
        'UPDATE "wordpress_product_variations" '
        'SET "permalink"=?, "size"=?, "price"=?, "quantity"=?, "date_modified_gmt"=? '
        'WHERE "id"=? AND "sku"=?'
    )
    assert statement['Parameters'] == [
        {'S': 'https://shop.example.com/product/t-shirt/?attribute_size=m'},
        {'S': 'M'},
        {'N': '19.99'},
        {'N': '0'},
        {'S': NOW},
        {'S': '1042'},
        {'S': 'TSHIRT-RED-M'},
    ]


def test_update_never_touches_creation_date_or_identity(make_variation):
    statement = build_update_statement(make_variation(), TABLE, NOW)
    set_clause, where_clause = statement['Statement'].split(' WHERE ')

    assert 'date_created_gmt' not in statement['Statement']
    assert '"id"' not in set_clause
    assert '"sku"' not in set_clause
    assert where_clause == '"id"=? AND "sku"=?'


def test_build_statement_dispatches_on_method(make_variation):
    insert = build_statement(make_variation(), 'POST', TABLE, NOW)
    update = build_statement(make_variation(), 'PATCH', TABLE, NOW)

    assert insert['Statement'].startswith('INSERT INTO')
    assert update['Statement'].startswith('UPDATE')


def test_build_statement_defaults_to_current_time(make_variation):
    with patch.object(statements, 'iso_timestamp', return_value=NOW):
        statement = build_statement(make_variation(), 'POST', TABLE)

    assert statement['Parameters'][-2:] == [{'S': NOW}, {'S': NOW}]


def test_build_statement_rejects_other_methods(make_variation):
    with pytest.raises(RequestShapeError):
        build_statement(make_variation(), 'PUT', TABLE, NOW)


def test_create_timestamps_are_equal_per_element_and_taken_per_element(make_variation):
    clock = iter(['2024-05-01T00:00:00.000Z', '2024-05-01T00:00:01.000Z'])

    built = build_statements(
        [make_variation(), make_variation(id='1043')],
        'POST',
        TABLE,
        clock=lambda: next(clock),
    )

    first, second = (statement['Parameters'][-2:] for statement in built)
    assert first == [{'S': '2024-05-01T00:00:00.000Z'}] * 2
    assert second == [{'S': '2024-05-01T00:00:01.000Z'}] * 2


def test_build_statements_stops_at_first_invalid_element(make_variation):
    variations = [
        make_variation(),
        make_variation(sku=None),
        # would fail on id if it were ever looked at
        make_variation(id=None),
    ]

    with patch.object(statements, 'ensure_valid', wraps=statements.ensure_valid) as ensure_valid:
        with pytest.raises(FieldValidationError) as excinfo:
            build_statements(variations, 'POST', TABLE, clock=lambda: NOW)

    assert excinfo.value.index == 1
    assert excinfo.value.name == 'No sku provided'
    assert ensure_valid.call_count == 2


def test_round_trip_preserves_values_and_types(make_variation):
    variation = make_variation(price=Decimal('24.50'), quantity=3)

    values = parameters_to_values(build_insert_statement(variation, TABLE, NOW)['Parameters'])

    assert values[:6] == [
        variation['id'],
        variation['sku'],
        variation['permalink'],
        Decimal('24.50'),
        3,
        variation['size'],
    ]
    assert isinstance(values[3], Decimal)
    assert isinstance(values[4], int)
    assert all(isinstance(values[i], str) for i in (0, 1, 2, 5, 6, 7))


def test_float_price_round_trips(make_variation):
    values = parameters_to_values(build_update_statement(make_variation(price=19.99), TABLE, NOW)['Parameters'])

    assert values[2] == Decimal('19.99')


def test_parameters_to_values_handles_null():
    assert parameters_to_values([{'NULL': True}, {'N': '1E+2'}]) == [None, Decimal('100')]


def test_parameters_to_values_rejects_unknown_types():
    with pytest.raises(ValueError):
        parameters_to_values([{'BOOL': True}])


def test_only_well_typed_variations_reach_the_parameters(make_variation):
    with pytest.raises(FieldValidationError) as excinfo:
        build_statements([make_variation(id={'a': 1}, size=['M'], price=True)], 'POST', TABLE)

    assert excinfo.value.field == 'id'


def test_every_built_statement_round_trips(make_variation):
    variations = [make_variation(price=Decimal('1E+2'), quantity=0), make_variation(price=5, quantity=Decimal('2.5'))]

    for statement in build_statements(variations, 'POST', TABLE, clock=lambda: NOW):
        values = parameters_to_values(statement['Parameters'])
        assert all(isinstance(value, (str, int, Decimal)) for value in values)
