import io
import os
import tempfile
import unittest
from contextlib import redirect_stdout

from minifunc.lang.error import ErrorHandler, EvalError, GenericException, ParseError
from minifunc.lang.session import Session
from minifunc.lang.shell import Shell


PROGRAM = """\
;; squares
apply(func x => *(x, x), 7)
+(1,      ;; continues
  2) T
if !F then x else y

apply(apply(func x => func y => +(*(x, x), *(y, y)),
            3),
      5)
"""


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.dir = tempfile.TemporaryDirectory()

    def tearDown(self):
        self.dir.cleanup()

    def write(self, text):
        path = os.path.join(self.dir.name, "prog.mf")
        with open(path, "w") as file:
            file.write(text)
        return path

    def test_preprocess_line(self):
        stmts = []
        line, add_to_prev = Session.preprocess_line("+(1, ;; comment\n", 1, False, stmts)
        self.assertEqual(("+(1,", True), (line, add_to_prev))

        line, add_to_prev = Session.preprocess_line("2)\n", 2, add_to_prev, stmts)
        self.assertEqual(("+(1, 2)", False), (line, add_to_prev))
        self.assertEqual([("+(1, 2)", 1)], stmts)

        self.assertEqual(("", False), Session.preprocess_line(";; only a comment", 3, False, stmts))
        self.assertEqual(1, len(stmts))

    def test_run_file(self):
        sess = Session(ErrorHandler(), self.write(PROGRAM), cmd_line=False)
        self.assertEqual([2, 3, 3, 5, 7], [line_num for line_num, __, __ in sess.to_exec])

        sess.run()
        self.assertEqual(["49", "3", "T", "x", "34"], [str(result) for result in sess.results])
        self.assertEqual([], sess.to_exec)

        self.assertEqual("49", str(sess.pop()))
        self.assertEqual(4, len(sess.results))

    def test_parse_error_in_file(self):
        with self.assertRaises(ParseError) as context:
            Session(ErrorHandler(), self.write("+(1, 1)\n+(1 1)\n"), cmd_line=False)
        self.assertEqual("+(1 1)", context.exception.expr)

    def test_eval_error_in_file(self):
        sess = Session(ErrorHandler(), self.write("1\n-(1, 2)\n3\n"), cmd_line=False)
        with self.assertRaises(EvalError):
            sess.run()
        self.assertEqual(["1"], [str(result) for result in sess.results])

    def test_parse_error_queues_nothing(self):
        sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)
        self.assertRaises(ParseError, sess.add, "1 2 )", 1)
        self.assertEqual([], sess.to_exec)

    def test_eval_error_clears_queue_in_command_line_mode(self):
        sess = Session(ErrorHandler(), Session.SH_FILE, cmd_line=True)
        sess.add("1 !2 3", 1)
        self.assertRaises(EvalError, sess.run)
        self.assertEqual([], sess.to_exec)
        self.assertEqual(["1"], [str(result) for result in sess.results])

    def test_missing_file(self):
        path = os.path.join(self.dir.name, "missing.mf")
        self.assertRaises(GenericException, Session, ErrorHandler(), path, cmd_line=False)

    def test_reserved_filename(self):
        self.assertRaises(GenericException, Session, ErrorHandler(), Session.SH_FILE, cmd_line=False)

    def test_trace(self):
        sess = Session(ErrorHandler(verbose=True), self.write("apply(func x => +(x, 1), 1)"), cmd_line=False)
        with redirect_stdout(io.StringIO()) as out:
            sess.run()
        self.assertIn("β", out.getvalue())
        self.assertIn("x + 1 (1)", out.getvalue())
        self.assertIn("1 + 1", out.getvalue())


class ShellTestCase(unittest.TestCase):

    def setUp(self):
        self.shell = Shell(Session(ErrorHandler(), Session.SH_FILE, cmd_line=True))

    def run_cmd(self, line):
        with redirect_stdout(io.StringIO()) as out:
            stop = self.shell.onecmd(line)
        return stop, out.getvalue()

    def test_not_fatal(self):
        self.assertFalse(self.shell.sess.error_handler.fatal)

    def test_evaluate(self):
        cases = {
            "+(1, 2)": "3\n",
            "apply(func x => -(x, 5), +(1, 9))": "5\n",
            "if <(1, 5) then 8 else 9": "8\n",
            "func x => x": "func x => x\n",
            "T F": "T\nF\n",
            "x": "x\n",
            "7": "7\n",
        }
        for case, expected in cases.items():
            self.assertEqual((None, expected), self.run_cmd(case), case)

    def test_continuation(self):
        self.assertEqual((None, ""), self.run_cmd("apply(func x => *(x, x),"))
        self.assertEqual(self.shell.secondary_prompt, self.shell.prompt)

        self.assertEqual((None, "49\n"), self.run_cmd("7)"))
        self.assertEqual("> ", self.shell.prompt)

    def test_errors_are_reported(self):
        __, output = self.run_cmd("+(T, 1)")
        self.assertIn("given non-integer", output)

        __, output = self.run_cmd("+(1; 1)")
        self.assertIn("but found", output)

        self.assertEqual((None, "2\n"), self.run_cmd("+(1, 1)"))

    def test_failed_line_leaves_nothing_queued(self):
        cases = {
            "+(T, 1) 5": "",
            "5 )": "",
            "5 +(T, 1) 6": "5\n",
        }
        for case, printed in cases.items():
            __, output = self.run_cmd(case)
            self.assertTrue(output.startswith(printed), case)
            self.assertIn("error", output, case)

            self.assertEqual((None, "7\n"), self.run_cmd("7"), case)
            self.assertEqual([], self.shell.sess.to_exec, case)
            self.assertEqual([], self.shell.sess.results, case)

    def test_tree(self):
        __, output = self.run_cmd("tree +(1, x)")
        self.assertIn("Add('1 + x', nodes=[", output)
        self.assertIn("Variable('x')", output)

        __, output = self.run_cmd("tree")
        self.assertIn("Blank program", output)

    def test_trace(self):
        self.assertEqual((None, "trace is on\n"), self.run_cmd("trace on"))
        __, output = self.run_cmd("apply(func x => x, 1)")
        self.assertIn("β", output)
        self.assertTrue(output.endswith("1\n"))

        self.assertEqual((None, "trace is off\n"), self.run_cmd("trace off"))
        self.assertEqual((None, "1\n"), self.run_cmd("apply(func x => x, 1)"))

        __, output = self.run_cmd("trace maybe")
        self.assertIn("trace expects", output)

    def test_help(self):
        __, output = self.run_cmd("help")
        self.assertIn("Welcome to the minifunc interpreter!", output)

    def test_exit(self):
        self.assertTrue(self.run_cmd("exit")[0])
        self.assertTrue(self.run_cmd("EOF")[0])
        self.assertEqual(("", ""), self.run_cmd(""))


if __name__ == '__main__':
    unittest.main()
