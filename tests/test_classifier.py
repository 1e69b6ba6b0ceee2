"""Tests for transaction classification."""

import random
from decimal import Decimal

import pytest

from factories import make_transaction
from shop_ledger.classifier import TransactionClassifier, classify
from shop_ledger.config.keywords import KeywordConfig
from shop_ledger.models import Transaction, TransactionCategory, TransactionType


@pytest.fixture
def classifier():
    return TransactionClassifier()


class TestRulePrecedence:
    """Rules apply in a fixed order; the first match wins."""

    def test_order_payment_keyword(self, classifier):
        transaction = make_transaction(100, "income", "تحصيل من طلب")

        assert classifier.classify(transaction) == TransactionCategory.ORDER_PAYMENT

    def test_deposit_keyword(self, classifier):
        transaction = make_transaction(50, "income", "عربون طلب جديد")

        assert classifier.classify(transaction) == TransactionCategory.ORDER_PAYMENT

    def test_real_serial_without_keyword_is_order_payment(self, classifier):
        transaction = make_transaction(80, "income", "", order_serial="ORD-1001")

        assert classifier.classify(transaction) == TransactionCategory.ORDER_PAYMENT

    @pytest.mark.parametrize(
        "serial",
        ["MANUAL-1704067200000", "TRANSFER-1", "EXP-9", "PROFIT-3", "MISC-12", "manual-5"],
    )
    def test_synthetic_serial_is_not_an_order_link(self, classifier, serial):
        transaction = make_transaction(80, "income", "", order_serial=serial)

        assert classifier.classify(transaction) == TransactionCategory.OTHER_INCOME

    def test_shipping_keyword(self, classifier):
        transaction = make_transaction(30, "expense", "شحن")

        assert classifier.classify(transaction) == TransactionCategory.SHIPPING

    def test_shipping_keyword_beats_income_flag(self, classifier):
        transaction = make_transaction(30, "income", "رسوم شحن")

        assert classifier.classify(transaction) == TransactionCategory.SHIPPING

    def test_advertising_keyword(self, classifier):
        transaction = make_transaction(200, "expense", "مصروفات إعلانات فيسبوك")

        assert classifier.classify(transaction) == TransactionCategory.ADVERTISING

    def test_order_payment_beats_shipping(self, classifier):
        transaction = make_transaction(45, "income", "تحصيل رسوم شحن")

        assert classifier.classify(transaction) == TransactionCategory.ORDER_PAYMENT

    def test_shipping_beats_advertising(self, classifier):
        transaction = make_transaction(45, "expense", "شحن مواد دعاية")

        assert classifier.classify(transaction) == TransactionCategory.SHIPPING

    def test_real_serial_beats_shipping_keyword(self, classifier):
        transaction = make_transaction(20, "expense", "شحن", order_serial="ORD-1001")

        assert classifier.classify(transaction) == TransactionCategory.ORDER_PAYMENT

    def test_fallback_income(self, classifier):
        transaction = make_transaction(500, "income", "بيع معدات قديمة")

        assert classifier.classify(transaction) == TransactionCategory.OTHER_INCOME

    def test_fallback_expense(self, classifier):
        transaction = make_transaction(60, "expense", "إيجار")

        assert classifier.classify(transaction) == TransactionCategory.OTHER_EXPENSE

    def test_latin_keywords_ignore_case(self, classifier):
        transaction = make_transaction(60, "expense", "Facebook MARKETING boost")

        assert classifier.classify(transaction) == TransactionCategory.ADVERTISING


class TestEmptyInput:
    def test_empty_description_uses_type(self, classifier):
        assert classifier.classify(make_transaction(1, "income", "")) == (
            TransactionCategory.OTHER_INCOME
        )
        assert classifier.classify(make_transaction(1, "expense", "")) == (
            TransactionCategory.OTHER_EXPENSE
        )

    def test_none_description_does_not_raise(self, classifier):
        transaction = Transaction(
            id="t", amount=Decimal("1"), transaction_type=TransactionType.INCOME, description=None
        )

        assert classifier.classify(transaction) == TransactionCategory.OTHER_INCOME

    def test_unknown_type_classified_as_expense(self, classifier):
        transaction = make_transaction(10, "refund", "")

        assert classifier.classify(transaction) == TransactionCategory.OTHER_EXPENSE


class TestTotality:
    """classify returns exactly one category for any transaction."""

    WORDS = ["شحن", "تحصيل", "إعلان", "دفعة", "إيجار", "shipping", "ads", "", "  ", "x"]
    SERIALS = [None, "", "ORD-1", "MANUAL-1", "TRANSFER-2", "misc-3", "12345"]
    TYPES = ["income", "expense", "", "INCOME", "bogus", None]

    @pytest.mark.parametrize("seed", range(20))
    def test_random_transactions(self, classifier, seed):
        rng = random.Random(seed)
        for _ in range(50):
            description = " ".join(rng.choice(self.WORDS) for _ in range(rng.randint(0, 3)))
            transaction = Transaction.from_record(
                {
                    "id": "t",
                    "amount": rng.randint(-1000, 1000),
                    "transaction_type": rng.choice(self.TYPES),
                    "description": description,
                    "order_serial": rng.choice(self.SERIALS),
                }
            )

            category = classifier.classify(transaction)

            assert isinstance(category, TransactionCategory)
            assert classifier.classify(transaction) is category


class TestInjectedConfig:
    def test_custom_keywords_replace_defaults(self):
        config = KeywordConfig(
            keywords={
                TransactionCategory.ORDER_PAYMENT: ("payment",),
                TransactionCategory.SHIPPING: ("courier",),
                TransactionCategory.ADVERTISING: ("promo",),
            }
        )
        classifier = TransactionClassifier(config)

        assert classifier.classify(make_transaction(5, "expense", "courier fee")) == (
            TransactionCategory.SHIPPING
        )
        # Default Arabic keyword no longer recognized
        assert classifier.classify(make_transaction(5, "expense", "شحن")) == (
            TransactionCategory.OTHER_EXPENSE
        )

    def test_custom_synthetic_prefixes(self):
        config = KeywordConfig(synthetic_prefixes=("AUTO-",))
        classifier = TransactionClassifier(config)

        assert classifier.classify(make_transaction(5, "income", "", "AUTO-1")) == (
            TransactionCategory.OTHER_INCOME
        )
        assert classifier.classify(make_transaction(5, "income", "", "MANUAL-1")) == (
            TransactionCategory.ORDER_PAYMENT
        )

    def test_module_level_classify_accepts_config(self):
        config = KeywordConfig(keywords={TransactionCategory.SHIPPING: ("courier",)})

        assert classify(make_transaction(5, "expense", "courier")) == (
            TransactionCategory.OTHER_EXPENSE
        )
        assert classify(make_transaction(5, "expense", "courier"), config) == (
            TransactionCategory.SHIPPING
        )


class TestBadges:
    def test_badge_pairs_category_with_label(self, classifier):
        category, label = classifier.badge(make_transaction(30, "expense", "شحن"))

        assert category == TransactionCategory.SHIPPING
        assert label == "شحن"

    def test_every_category_has_a_label(self, classifier):
        for category in TransactionCategory:
            assert classifier.display_label(category)

    def test_classify_all_preserves_order(self, classifier):
        transactions = [
            make_transaction(1, "income", "", id="a"),
            make_transaction(1, "expense", "شحن", id="b"),
        ]

        result = classifier.classify_all(transactions)

        assert [(t.id, c) for t, c in result] == [
            ("a", TransactionCategory.OTHER_INCOME),
            ("b", TransactionCategory.SHIPPING),
        ]
