import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from agvault import config  # noqa: E402
from agvault.errors import AuthenticationError, FormatError, ValidationError  # noqa: E402
from agvault.inputs import InputSet, validate_source  # noqa: E402
from agvault.naming import (  # noqa: E402
    encrypted_name,
    format_file_size,
    format_gigabytes,
    is_encrypted_name,
    numbered_name,
    original_name,
    sanitize_group_name,
    validate_filename,
)
from agvault.password import evaluate_password  # noqa: E402
from agvault.presentation import (  # noqa: E402
    CORRUPTED_FILE,
    INVALID_PASSWORD,
    NOT_ENCRYPTED,
    UNKNOWN_FAILURE,
    describe_decrypt_failure,
)
from agvault.sources import SourceFile  # noqa: E402

_GIB = 1024 * 1024 * 1024


def _named(name: str, size: int = 4) -> SourceFile:
    return SourceFile(name=name, size=size, mime_type="", reader=lambda: b"x" * size)


class InputSetTests(unittest.TestCase):
    def test_add_keeps_order(self):
        inputs = InputSet()
        result = inputs.add([_named("a"), _named("b"), _named("c")])
        self.assertTrue(result.ok)
        self.assertEqual([f.name for f in inputs], ["a", "b", "c"])
        self.assertIsNone(inputs.error)

    def test_partial_rejection_appends_valid(self):
        inputs = InputSet(max_bytes=10)
        result = inputs.add([_named("small", 5), _named("huge", 50), _named("empty", 0)])
        self.assertEqual([f.name for f in result.accepted], ["small"])
        self.assertEqual(len(result.errors), 2)
        self.assertEqual(len(inputs), 1)
        self.assertIsNotNone(inputs.error)

    def test_full_rejection_leaves_set_unchanged(self):
        inputs = InputSet(max_bytes=10)
        inputs.add([_named("keep", 3)])
        result = inputs.add([_named("huge", 50)])
        self.assertFalse(result.ok)
        self.assertEqual([f.name for f in inputs], ["keep"])
        self.assertIn("huge", inputs.error)
        inputs.clear_error()
        self.assertIsNone(inputs.error)

    def test_oversize_message(self):
        message = validate_source(_named("movie.mkv", int(1.5 * _GIB)))
        self.assertEqual(message, 'File "movie.mkv" (1.5GB) exceeds the 1GB limit')
        self.assertEqual(
            validate_source(_named("blank.txt", 0)),
            'File "blank.txt" is empty and cannot be encrypted',
        )
        self.assertIsNone(validate_source(_named("fine.txt", 1)))

    def test_remove(self):
        inputs = InputSet()
        inputs.add([_named("a"), _named("b"), _named("c")])
        inputs.remove(1)
        self.assertEqual([f.name for f in inputs], ["a", "c"])
        inputs.remove(9)
        self.assertEqual(len(inputs), 2)

    def test_reorder(self):
        inputs = InputSet()
        inputs.add([_named("a"), _named("b"), _named("c"), _named("d")])
        inputs.reorder(0, 2)
        self.assertEqual([f.name for f in inputs], ["b", "c", "a", "d"])
        inputs.reorder(3, 0)
        self.assertEqual([f.name for f in inputs], ["d", "b", "c", "a"])

    def test_reorder_out_of_range_is_noop(self):
        inputs = InputSet()
        inputs.add([_named("a"), _named("b")])
        inputs.reorder(5, 0)
        inputs.reorder(-1, 0)
        self.assertEqual([f.name for f in inputs], ["a", "b"])
        inputs.reorder(0, 9)
        self.assertEqual([f.name for f in inputs], ["b", "a"])

    def test_add_rejects_single_path_string(self):
        inputs = InputSet()
        with self.assertRaises(TypeError):
            inputs.add("notes.txt")
        with self.assertRaises(TypeError):
            inputs.add(Path("notes.txt"))
        self.assertEqual(len(inputs), 0)

    def test_remove_all(self):
        inputs = InputSet(max_bytes=1)
        inputs.add([_named("a", 1)])
        inputs.add([_named("too-big", 2)])
        inputs.remove_all()
        self.assertEqual(len(inputs), 0)
        self.assertIsNone(inputs.error)

    def test_add_paths(self):
        with tempfile.TemporaryDirectory() as tmp:
            good = Path(tmp) / "good.txt"
            good.write_text("content")
            inputs = InputSet()
            result = inputs.add([good, Path(tmp) / "missing.txt"])
        self.assertEqual([f.name for f in result.accepted], ["good.txt"])
        self.assertIn("not found", result.errors[0])
        self.assertEqual(inputs[0].mime_type, "text/plain")


class NamingTests(unittest.TestCase):
    def test_marker_helpers(self):
        self.assertEqual(encrypted_name("a.pdf"), "a.pdf.ag")
        self.assertTrue(is_encrypted_name("a.pdf.ag"))
        self.assertFalse(is_encrypted_name("a.pdf"))
        self.assertEqual(original_name("a.pdf.ag"), "a.pdf")
        self.assertEqual(original_name("plain"), "plain")

    def test_format_file_size(self):
        self.assertEqual(format_file_size(0), "0 Bytes")
        self.assertEqual(format_file_size(512), "512 Bytes")
        self.assertEqual(format_file_size(1024), "1 KB")
        self.assertEqual(format_file_size(1536), "1.5 KB")
        self.assertEqual(format_file_size(3 * 1024 * 1024), "3 MB")

    def test_format_gigabytes(self):
        self.assertEqual(format_gigabytes(_GIB), "1GB")
        self.assertEqual(format_gigabytes(int(1.5 * _GIB)), "1.5GB")
        self.assertEqual(format_gigabytes(5 * _GIB), "5GB")

    def test_numbered_name(self):
        self.assertEqual(numbered_name("x.txt", 1), "x (1).txt")
        self.assertEqual(numbered_name("archive.tar.gz", 2), "archive.tar (2).gz")
        self.assertEqual(numbered_name("README", 3), "README (3)")

    def test_validate_filename(self):
        self.assertIsNone(validate_filename("report.txt"))
        self.assertEqual(validate_filename("a/b"), "Filename contains invalid characters")
        self.assertEqual(validate_filename("   "), "Filename cannot be empty")
        self.assertIn("too long", validate_filename("x" * 256))

    def test_group_names(self):
        self.assertEqual(sanitize_group_name(None), config.DEFAULT_GROUP_NAME)
        self.assertEqual(sanitize_group_name('a<b>c'), "a_b_c")


class PasswordTests(unittest.TestCase):
    def test_empty(self):
        policy = evaluate_password("")
        self.assertEqual(policy.strength, "weak")
        self.assertEqual(policy.errors, ["Password is required"])
        self.assertFalse(policy.is_valid)

    def test_short_is_weak(self):
        policy = evaluate_password("abc")
        self.assertEqual(policy.strength, "weak")
        self.assertFalse(policy.min_length_ok)

    def test_medium(self):
        policy = evaluate_password("abcDEF12")
        self.assertEqual(policy.strength, "medium")
        self.assertTrue(policy.is_valid)
        self.assertFalse(policy.recommended_length_ok)

    def test_strong(self):
        policy = evaluate_password("Correct-Horse-42")
        self.assertEqual(policy.strength, "strong")
        self.assertEqual(policy.errors, [])

    def test_long_but_plain(self):
        policy = evaluate_password("aaaaaaaaaaaaaaaa")
        self.assertEqual(policy.strength, "weak")
        self.assertIn("Password should contain numbers", policy.errors)


class PresentationTests(unittest.TestCase):
    def test_authentication_failure(self):
        exc = AuthenticationError("Invalid password or corrupted file: Decryption failed")
        self.assertEqual(describe_decrypt_failure(exc), INVALID_PASSWORD)

    def test_format_failure(self):
        exc = FormatError("Invalid file format: File is not a valid encrypted file")
        self.assertEqual(describe_decrypt_failure(exc), CORRUPTED_FILE)

    def test_header_failure(self):
        self.assertEqual(describe_decrypt_failure(ValueError("invalid header")), NOT_ENCRYPTED)

    def test_passthrough_and_unknown(self):
        exc = ValidationError("Selected file does not appear to be encrypted")
        self.assertEqual(describe_decrypt_failure(exc), str(exc))
        self.assertEqual(describe_decrypt_failure(None), UNKNOWN_FAILURE)
        self.assertEqual(describe_decrypt_failure(RuntimeError("")), UNKNOWN_FAILURE)


if __name__ == "__main__":
    unittest.main(verbosity=2)
