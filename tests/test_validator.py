import unittest
from decimal import Decimal

from wallet_intents.llm.actions import ActionKind, AutoTradeSetting, SwapAction, TransferAction
from wallet_intents.llm.errors import (
    ActionValidationError,
    InvariantViolation,
    MissingRequiredField,
    RangeInvariantViolation,
    TypeMismatch,
    UnexpectedField,
    UnknownAction,
)
from wallet_intents.llm.validator import to_decimal, validate_action, validate_function_call


def _auto_call(**overrides):
    call = {
        "tokenToBuy": "ETH",
        "tokenToSell": None,
        "specifiedAmount": None,
        "specifiedToken": None,
    }
    call.update(overrides)
    return call


class ToDecimalTests(unittest.TestCase):
    def test_accepts_numbers_and_numeric_strings(self):
        self.assertEqual(to_decimal(5), Decimal("5"))
        self.assertEqual(to_decimal(0.1), Decimal("0.1"))
        self.assertEqual(to_decimal(" 10.25 "), Decimal("10.25"))
        self.assertEqual(to_decimal("1e3"), Decimal("1000"))

    def test_rejects_non_numbers(self):
        for value in ("ten", "", True, None, [1], "nan", float("inf")):
            with self.subTest(value=value):
                with self.assertRaises(ValueError):
                    to_decimal(value)


class TransferValidationTests(unittest.TestCase):
    def test_valid_transfer_is_normalized(self):
        action = validate_action(
            ActionKind.transfer,
            {"specifiedToken": " usd ", "specifiedAmount": 5, "transferTo": " Alice "},
        )
        self.assertIsInstance(action, TransferAction)
        self.assertEqual(action.token, "USDC")
        self.assertEqual(action.amount, Decimal("5"))
        self.assertEqual(action.recipient, "Alice")

    def test_numeric_string_amount(self):
        action = validate_action(
            ActionKind.transfer,
            {"specifiedToken": "ETH", "specifiedAmount": "0.25", "transferTo": "bob"},
        )
        self.assertEqual(action.amount, Decimal("0.25"))

    def test_non_positive_amount_is_invariant_error(self):
        for amount in (0, -3, "-0.5"):
            with self.subTest(amount=amount):
                with self.assertRaises(ActionValidationError) as ctx:
                    validate_action(
                        ActionKind.transfer,
                        {"specifiedToken": "ETH", "specifiedAmount": amount, "transferTo": "bob"},
                    )
                issues = ctx.exception.issues
                self.assertEqual(len(issues), 1)
                self.assertIsInstance(issues[0], InvariantViolation)
                self.assertNotIsInstance(issues[0], RangeInvariantViolation)
                self.assertEqual(ctx.exception.fields, ["specifiedAmount"])

    def test_all_missing_fields_are_reported_in_schema_order(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(ActionKind.transfer, {})
        self.assertEqual(ctx.exception.missing, ["specifiedToken", "specifiedAmount", "transferTo"])
        self.assertEqual(
            ctx.exception.user_message(), "missing: specifiedToken, specifiedAmount, transferTo"
        )

    def test_null_and_blank_values_count_as_missing(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.transfer,
                {"specifiedToken": None, "specifiedAmount": 1, "transferTo": "   "},
            )
        self.assertEqual(ctx.exception.missing, ["specifiedToken", "transferTo"])

    def test_type_mismatch(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.transfer,
                {"specifiedToken": "ETH", "specifiedAmount": "ten", "transferTo": 42},
            )
        mismatches = ctx.exception.issues_of(TypeMismatch)
        self.assertEqual([m.field for m in mismatches], ["specifiedAmount", "transferTo"])
        self.assertEqual(mismatches[0].expected, "number")
        self.assertEqual(mismatches[0].actual, "ten")
        self.assertEqual(mismatches[1].expected, "string")
        self.assertIn("invalid: specifiedAmount (expected a number)", ctx.exception.user_message())

    def test_boolean_amount_is_rejected(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.transfer,
                {"specifiedToken": "ETH", "specifiedAmount": True, "transferTo": "bob"},
            )
        self.assertIsInstance(ctx.exception.issues[0], TypeMismatch)

    def test_invariants_wait_for_well_formed_input(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(ActionKind.transfer, {"specifiedToken": "ETH", "specifiedAmount": 0})
        self.assertEqual(len(ctx.exception.issues), 1)
        self.assertIsInstance(ctx.exception.issues[0], MissingRequiredField)

    def test_unexpected_field_is_oracle_fault(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.transfer,
                {"specifiedToken": "ETH", "specifiedAmount": 1, "transferTo": "bob", "memo": "hi"},
            )
        self.assertIsInstance(ctx.exception.issues[0], UnexpectedField)
        self.assertTrue(ctx.exception.is_oracle_fault)

    def test_bare_dollar_sign_is_missing_token(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.transfer,
                {"specifiedToken": "$", "specifiedAmount": 1, "transferTo": "bob"},
            )
        self.assertEqual(ctx.exception.missing, ["specifiedToken"])

    def test_arguments_must_be_a_mapping(self):
        with self.assertRaises(TypeError):
            validate_action(ActionKind.transfer, ["ETH", 1, "bob"])


class SwapValidationTests(unittest.TestCase):
    def test_valid_swap(self):
        action = validate_action(
            ActionKind.swap,
            {
                "tokenToBuy": "usd",
                "tokenToSell": "Ethereum",
                "specifiedAmount": 10,
                "specifiedToken": "eth",
            },
        )
        self.assertIsInstance(action, SwapAction)
        self.assertEqual(action.token_to_buy, "USDC")
        self.assertEqual(action.token_to_sell, "ETH")
        self.assertEqual(action.reference_token, "ETH")
        self.assertEqual(action.amount, Decimal("10"))

    def test_same_token_after_normalization(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.swap,
                {
                    "tokenToBuy": "ethereum",
                    "tokenToSell": "ETH",
                    "specifiedAmount": 1,
                    "specifiedToken": "ETH",
                },
            )
        self.assertEqual(ctx.exception.fields, ["tokenToBuy", "tokenToSell"])

    def test_reference_token_must_be_one_side(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.swap,
                {
                    "tokenToBuy": "USDC",
                    "tokenToSell": "ETH",
                    "specifiedAmount": 1,
                    "specifiedToken": "BTC",
                },
            )
        issue = ctx.exception.issues[0]
        self.assertIsInstance(issue, InvariantViolation)
        self.assertEqual(issue.fields, ("specifiedToken",))

    def test_swap_fields_are_not_nullable(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.swap,
                {
                    "tokenToBuy": "USDC",
                    "tokenToSell": None,
                    "specifiedAmount": 1,
                    "specifiedToken": "USDC",
                },
            )
        self.assertEqual(ctx.exception.missing, ["tokenToSell"])

    def test_swap_amount_must_be_positive(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.swap,
                {
                    "tokenToBuy": "USDC",
                    "tokenToSell": "ETH",
                    "specifiedAmount": 0,
                    "specifiedToken": "ETH",
                },
            )
        issue = ctx.exception.issues[0]
        self.assertIsInstance(issue, InvariantViolation)
        self.assertEqual(issue.fields, ("specifiedAmount",))


class AutoTradeValidationTests(unittest.TestCase):
    def test_nulls_are_accepted(self):
        action = validate_action(ActionKind.auto_trade_setting, _auto_call(buyMax=100))
        self.assertIsInstance(action, AutoTradeSetting)
        self.assertEqual(action.token_to_buy, "ETH")
        self.assertEqual(action.buy_max, Decimal("100"))
        self.assertIsNone(action.buy_min)
        self.assertIsNone(action.amount)
        self.assertTrue(action.uses_all_funds)

    def test_open_ranges(self):
        action = validate_action(
            ActionKind.auto_trade_setting, _auto_call(buyMax=100, sellMin="20")
        )
        self.assertEqual(action.buy_range, (Decimal(0), Decimal("100")))
        self.assertEqual(action.sell_range, (Decimal("20"), None))

    def test_structurally_required_keys(self):
        call = _auto_call()
        del call["tokenToBuy"]
        del call["specifiedAmount"]
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(ActionKind.auto_trade_setting, call)
        self.assertEqual(ctx.exception.missing, ["tokenToBuy", "specifiedAmount"])

    def test_buy_bounds_must_be_ordered(self):
        for low, high in ((100, 50), (50, 50)):
            with self.subTest(low=low, high=high):
                with self.assertRaises(ActionValidationError) as ctx:
                    validate_action(
                        ActionKind.auto_trade_setting, _auto_call(buyMin=low, buyMax=high)
                    )
                issue = ctx.exception.issues_of(RangeInvariantViolation)[0]
                self.assertEqual((issue.field_a, issue.field_b), ("buyMin", "buyMax"))
                self.assertEqual((issue.value_a, issue.value_b), (Decimal(low), Decimal(high)))

    def test_sell_bounds_must_be_ordered(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.auto_trade_setting,
                _auto_call(tokenToBuy=None, tokenToSell="USDC", sellMin=20, sellMax=10),
            )
        self.assertEqual(ctx.exception.fields, ["sellMin", "sellMax"])
        self.assertEqual(
            ctx.exception.user_message(),
            "invalid: sellMin, sellMax (sellMin must be less than sellMax, got 20 and 10)",
        )

    def test_ordered_bounds_pass(self):
        action = validate_action(
            ActionKind.auto_trade_setting,
            _auto_call(buyMin=10, buyMax=20.5, sellMin=30, sellMax=40),
        )
        self.assertEqual(action.buy_max, Decimal("20.5"))

    def test_negative_bound(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(ActionKind.auto_trade_setting, _auto_call(buyMax=-1))
        self.assertEqual(ctx.exception.fields, ["buyMax"])

    def test_buy_and_sell_tokens_must_differ(self):
        with self.assertRaises(ActionValidationError) as ctx:
            validate_action(
                ActionKind.auto_trade_setting, _auto_call(tokenToBuy="ether", tokenToSell="ETH")
            )
        self.assertIsInstance(ctx.exception.issues[0], InvariantViolation)
        self.assertEqual(ctx.exception.fields, ["tokenToBuy", "tokenToSell"])

    def test_amount_must_be_positive_when_given(self):
        with self.assertRaises(ActionValidationError):
            validate_action(ActionKind.auto_trade_setting, _auto_call(specifiedAmount=0))

    def test_reference_token_only_checked_with_both_sides(self):
        action = validate_action(
            ActionKind.auto_trade_setting,
            _auto_call(specifiedAmount=50, specifiedToken="usd"),
        )
        self.assertEqual(action.reference_token, "USDC")

        with self.assertRaises(ActionValidationError):
            validate_action(
                ActionKind.auto_trade_setting,
                _auto_call(tokenToSell="USDC", specifiedAmount=50, specifiedToken="BTC"),
            )


class RoundTripTests(unittest.TestCase):
    def test_revalidating_a_record_is_a_no_op(self):
        cases = [
            (ActionKind.transfer, {"specifiedToken": "usd", "specifiedAmount": 5, "transferTo": "Alice"}),
            (
                ActionKind.swap,
                {"tokenToBuy": "USDC", "tokenToSell": "ETH", "specifiedAmount": 0.1, "specifiedToken": "ETH"},
            ),
            (ActionKind.auto_trade_setting, _auto_call(buyMax=100, sellMin=2.5)),
        ]
        for kind, call in cases:
            with self.subTest(kind=kind):
                action = validate_action(kind, call)
                self.assertEqual(validate_action(kind, action.to_call()), action)

    def test_record_carries_kind(self):
        action = validate_action(
            ActionKind.transfer, {"specifiedToken": "usd", "specifiedAmount": 5, "transferTo": "Alice"}
        )
        self.assertEqual(
            action.to_record(),
            {"kind": "transfer", "specifiedToken": "USDC", "specifiedAmount": "5", "transferTo": "Alice"},
        )


class FunctionCallTests(unittest.TestCase):
    def test_dispatch_by_function_name(self):
        action = validate_function_call(
            "transfer_tokens", {"specifiedToken": "ETH", "specifiedAmount": 1, "transferTo": "bob"}
        )
        self.assertIsInstance(action, TransferAction)

    def test_unknown_function(self):
        with self.assertRaises(UnknownAction):
            validate_function_call("bridge_tokens", {})


if __name__ == "__main__":
    unittest.main()
