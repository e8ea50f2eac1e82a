"""
Unit tests for stored/target sequence validation.
"""

from banktx_sync.sequence import FieldMap, validate_day, validate_stored, validate_targets


def _row(identity, seq, description="Tx", amount="1.00"):
    return {"id": identity, "seq": seq, "description": description, "amount": amount}


class TestValidateStored:
    """Test structural checks on stored days."""

    def test_empty_day_is_valid(self):
        assert validate_stored([]).valid

    def test_contiguous_day_is_valid(self, stored_day):
        result = validate_stored(stored_day)

        assert result.valid
        assert result.issue is None
        assert result.message == "OK"

    def test_position_gap_names_index_and_field(self):
        rows = [_row(1, 1), _row(2, 3)]

        result = validate_stored(rows)

        assert not result.valid
        assert result.issue.sequence == "stored"
        assert result.issue.index == 1
        assert result.issue.field == "seq"
        assert result.message == "stored[1]: seq must be 2"

    def test_zero_position(self):
        result = validate_stored([_row(1, 0)])

        assert result.issue.index == 0
        assert "zero or undefined" in result.message

    def test_position_must_be_an_integer(self):
        for position in (True, 1.0, "1"):
            result = validate_stored([_row(1, position)])

            assert result.issue.field == "seq"
            assert result.message == "stored[0]: seq must be an integer"

    def test_missing_position(self):
        row = _row(1, 1)
        del row["seq"]

        result = validate_stored([row])

        assert result.issue.field == "seq"

    def test_missing_description(self):
        result = validate_stored([_row(1, 1, description=None)])

        assert result.issue.field == "description"
        assert result.message == "stored[0]: description must be defined"

    def test_missing_amount(self):
        result = validate_stored([_row(1, 1, amount=None)])

        assert result.issue.field == "amount"

    def test_missing_identity(self):
        result = validate_stored([_row(None, 1)])

        assert result.issue.field == "id"

    def test_zero_amount_is_defined(self):
        assert validate_stored([_row(1, 1, amount=0)]).valid

    def test_duplicate_identity(self):
        result = validate_stored([_row(7, 1), _row(7, 2)])

        assert result.issue.index == 1
        assert result.message == "stored[1]: id is not unique"

    def test_unhashable_identity(self):
        result = validate_stored([_row([1], 1)])

        assert result.issue.field == "id"
        assert "hashable" in result.message

    def test_non_mapping_row(self):
        result = validate_stored([("Tx1", "1.00")])

        assert result.issue.index == 0
        assert result.issue.field is None

    def test_not_a_list(self):
        result = validate_stored("Tx1")

        assert not result.valid
        assert result.issue.index is None

    def test_custom_field_names(self):
        fields = FieldMap(identity="tx_id", position="pos")
        rows = [{"tx_id": 1, "pos": 1, "description": "Tx", "amount": "1"}]

        assert validate_stored(rows, fields).valid
        assert not validate_stored([_row(1, 1)], fields).valid

    def test_position_checked_before_content(self):
        result = validate_stored([_row(1, 2, description=None)])

        assert result.issue.field == "seq"


class TestValidateTargets:
    """Test structural checks on target days."""

    def test_valid_targets(self, bank_day):
        assert validate_targets(bank_day).valid

    def test_missing_amount(self):
        result = validate_targets([{"description": "Tx1", "amount": "1"}, {"description": "Tx2"}])

        assert result.issue.sequence == "target"
        assert result.issue.index == 1
        assert result.issue.field == "amount"

    def test_date_only_required_when_asked(self):
        rows = [{"description": "Tx1", "amount": "1"}]

        assert validate_targets(rows).valid
        result = validate_targets(rows, require_date=True)
        assert result.issue.field == "date"

    def test_to_dict(self):
        result = validate_targets([{"amount": "1"}])

        assert result.issue.to_dict() == {
            "sequence": "target",
            "index": 0,
            "field": "description",
            "message": "target[0]: description must be defined",
        }


class TestValidateDay:
    def test_stored_checked_first(self):
        result = validate_day([_row(1, 2)], [{"description": None}])

        assert result.issue.sequence == "stored"

    def test_targets_checked_when_stored_valid(self, stored_day):
        result = validate_day(stored_day, [{"description": "Tx"}])

        assert result.issue.sequence == "target"

    def test_inputs_not_modified(self, stored_day, bank_day):
        stored_copy = [dict(r) for r in stored_day]
        bank_copy = [dict(r) for r in bank_day]

        validate_day(stored_day, bank_day)

        assert stored_day == stored_copy
        assert bank_day == bank_copy
