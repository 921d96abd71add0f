"""Tests for sensitive data sanitization."""
import unittest

from statementflow.sanitizer import (
    DataSanitizer,
    PIIKind,
    SanitizationConfig,
    mask_string,
    sanitize_text,
)


class TestDataSanitizer(unittest.TestCase):
    """Test DataSanitizer functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.sanitizer = DataSanitizer()

    def test_clean_text_is_unchanged(self):
        """Text without sensitive data passes through untouched."""
        text = (
            "01/01/2025 Opening Balance 1,234.56\n"
            "05/01/2025 POS PURCHASE GROCERY 200.00 1,034.56\n"
        )
        result = self.sanitizer.sanitize(text)

        self.assertEqual(result.sanitized_text, text)
        self.assertEqual(result.detections, [])
        self.assertTrue(all(count == 0 for count in result.security_breakdown().values()))

    def test_labelled_account_number_keeps_label(self):
        """Only the value after an account label is masked."""
        result = self.sanitizer.sanitize("Account No: 123456789012")

        self.assertEqual(result.sanitized_text, "Account No: ************")
        self.assertEqual(result.summary[PIIKind.ACCOUNT_NUMBER], 1)

    def test_masking_preserves_length(self):
        """Every masked value has the same length as its original."""
        text = (
            "Contact john.doe@example.com or +91 9876543210\n"
            "Card 4111 1111 1111 1111 PAN ABCDE1234F\n"
        )
        result = self.sanitizer.sanitize(text)

        self.assertEqual(len(result.sanitized_text), len(text))
        self.assertGreaterEqual(result.total_detections, 4)
        for detection in result.detections:
            self.assertEqual(len(detection.masked), len(detection.original))
            self.assertNotIn(detection.original, result.sanitized_text)

    def test_card_number_detected_before_account_number(self):
        """A bare 16-digit number is counted as a card, not an account."""
        result = self.sanitizer.sanitize("Paid with 4111111111111111 today")

        self.assertEqual(result.summary[PIIKind.CARD_NUMBER], 1)
        self.assertEqual(result.summary[PIIKind.ACCOUNT_NUMBER], 0)

    def test_amounts_and_balances_are_not_masked(self):
        """Decimal amounts are never mistaken for identifiers."""
        text = "Balance 136982.64 after debit of 9000000000510.00"
        result = self.sanitizer.sanitize(text)

        self.assertIn("136982.64", result.sanitized_text)
        self.assertIn("9000000000510.00", result.sanitized_text)

    def test_mobile_number_next_to_amount(self):
        """A reference that looks like a mobile number is masked, the amount is kept."""
        result = self.sanitizer.sanitize("UPI/9000000000/PAYMENT 510.00")

        self.assertEqual(result.sanitized_text, "UPI/**********/PAYMENT 510.00")
        self.assertEqual(result.summary[PIIKind.MOBILE_NUMBER], 1)

    def test_names_disabled_by_default(self):
        """Honorific-based name detection only runs when enabled."""
        text = "Statement for MR JOHN SMITH"

        self.assertEqual(self.sanitizer.sanitize(text).sanitized_text, text)

        enabled = DataSanitizer(SanitizationConfig(name=True)).sanitize(text)
        self.assertEqual(enabled.summary[PIIKind.NAME], 1)
        self.assertNotIn("JOHN SMITH", enabled.sanitized_text)

    def test_disabled_category_is_left_alone(self):
        """Turning a category off skips its patterns."""
        result = sanitize_text("Mail john.doe@example.com", SanitizationConfig(email=False))

        self.assertIn("john.doe@example.com", result.sanitized_text)
        self.assertEqual(result.summary[PIIKind.EMAIL], 0)

    def test_empty_text(self):
        """Empty input yields an empty result."""
        result = self.sanitizer.sanitize("")

        self.assertEqual(result.sanitized_text, "")
        self.assertEqual(result.total_detections, 0)

    def test_security_breakdown_covers_every_kind(self):
        """The security report always lists every category."""
        breakdown = self.sanitizer.sanitize("nothing here").security_breakdown()

        self.assertEqual(set(breakdown), {kind.value for kind in PIIKind})

    def test_detection_repr_hides_original(self):
        """Detections never print the original value."""
        result = self.sanitizer.sanitize("Account No: 123456789012")

        self.assertNotIn("123456789012", repr(result.detections[0]))


class TestMaskString(unittest.TestCase):
    """Test mask_string helper."""

    def test_preserve_format_keeps_punctuation(self):
        self.assertEqual(mask_string("4111-1111 11", "*", True), "****-**** **")

    def test_without_preserve_format(self):
        self.assertEqual(mask_string("4111-1111", "#", False), "#########")


class TestSanitizationConfigFromEnv(unittest.TestCase):
    """Test environment overrides."""

    def test_env_overrides(self):
        config = SanitizationConfig.from_env({
            "STATEMENTFLOW_SANITIZE_EMAILS": "false",
            "STATEMENTFLOW_SANITIZE_NAMES": "true",
            "STATEMENTFLOW_SANITIZATION_MASK_CHARACTER": "#",
            "STATEMENTFLOW_SANITIZATION_PRESERVE_FORMAT": "false",
        })

        self.assertFalse(config.email)
        self.assertTrue(config.name)
        self.assertTrue(config.card_number)
        self.assertEqual(config.masking_character, "#")
        self.assertFalse(config.preserve_format)

    def test_name_toggle_requires_true(self):
        config = SanitizationConfig.from_env({"STATEMENTFLOW_SANITIZE_NAMES": "yes"})

        self.assertFalse(config.name)


if __name__ == "__main__":
    unittest.main()
