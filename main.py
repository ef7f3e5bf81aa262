import logging
import sys
from exam_grader.cli import main as cli_main


def _run_cli_if_requested(argv: list[str]) -> int | None:
    if len(argv) >= 2 and argv[1] == "--cli":
        return cli_main(["exam_grader.cli", *argv[2:]])
    return None

def main():
    maybe_code = _run_cli_if_requested(sys.argv)
    if maybe_code is not None:
        sys.exit(maybe_code)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    from PyQt5.QtWidgets import QApplication
    from gui.main_window import MainWindow

    app = QApplication(sys.argv)
    window = MainWindow()
    window.show()
    sys.exit(app.exec_())

if __name__ == "__main__":
    main()
