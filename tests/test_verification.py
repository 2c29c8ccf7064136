import unittest

from orion.errors import VerificationError
from orion.verification import AnswerVerifier, normalize_code, normalize_prose


class AnswerVerifierTestCase(unittest.TestCase):
    def setUp(self):
        self.verifier = AnswerVerifier()

    def test_python_ignores_indentation_and_comments(self):
        correct = "def factorial(n):\n    if n == 0:\n        return 1\n    return n * factorial(n - 1)"
        submitted = "def factorial(n):\n  if n==0:\n    return 1  # base case\n  return n*factorial(n-1)\n"
        self.assertTrue(self.verifier.verify(correct, submitted, "python"))

    def test_python_wrong_fix_is_rejected(self):
        correct = "return n * factorial(n - 1)"
        self.assertFalse(self.verifier.verify(correct, "return n * factorial(n)", "python"))

    def test_code_answers_are_case_sensitive(self):
        correct = "return n * factorial(n - 1)"
        self.assertFalse(self.verifier.verify(correct, "RETURN N * FACTORIAL(N - 1)", "python"))

    def test_python_block_structure_matters(self):
        correct = "if x:\n    a()\nb()"
        self.assertFalse(self.verifier.verify(correct, "if x:\n    a()\n    b()", "python"))
        self.assertTrue(self.verifier.verify(correct, "if x:\n\ta()\n\nb()", "python"))

    def test_javascript_semicolons_and_block_comments(self):
        correct = "function add(a, b) {\n  return a + b;\n}"
        submitted = "/* sum */ function add(a,b){ return a+b }"
        self.assertTrue(self.verifier.verify(correct, submitted, "javascript"))

    def test_windows_line_endings(self):
        self.assertTrue(self.verifier.verify("x = 1\ny = 2", "x = 1\r\ny = 2", "python"))

    def test_prose_answers_ignore_case_and_trailing_punctuation(self):
        self.assertTrue(self.verifier.verify("Binary search", "binary search.", "python"))
        self.assertTrue(self.verifier.verify("[1, 2]", "[1,2]", "python"))
        self.assertFalse(self.verifier.verify("Binary search", "linear search", "python"))

    def test_html_comments_are_ignored(self):
        self.assertTrue(self.verifier.verify("<p>Hi</p>", "<p>Hi</p><!-- done -->", "html"))

    def test_non_text_answer_is_a_verification_error(self):
        with self.assertRaises(VerificationError):
            self.verifier.verify("print(1)", ["print(1)"], "python")


class NormalizeTestCase(unittest.TestCase):
    def test_normalize_code_collapses_whitespace(self):
        self.assertEqual(normalize_code("a  =\n  b", "go"), "a=b")

    def test_normalize_python_keeps_nesting(self):
        self.assertEqual(normalize_code("def f():\n  return  1\n", "python"), "def f():\n\treturn 1")

    def test_normalize_prose(self):
        self.assertEqual(normalize_prose('  "Observer Pattern!" '), "observer pattern")


if __name__ == "__main__":
    unittest.main()
