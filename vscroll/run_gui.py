import logging
import os
import sys
import threading
import traceback
import warnings
from datetime import datetime

try:
    from PySide6.QtWidgets import QApplication, QMessageBox
    from PySide6.QtCore import qInstallMessageHandler

    from vscroll.utils.settings import settings
    from vscroll.widgets.demo_window import DemoWindow
except Exception as e:
    with open('vscroll_import_crash.log', 'w') as f:
        f.write(str(e) + "\n" + traceback.format_exc())
    sys.exit(1)


def qt_message_handler(msg_type, msg_context, msg_string):
    """Suppress Qt's QPainter debug messages."""
    if "QPainter" in msg_string or "Paint device returned engine" in msg_string:
        return
    if os.getenv('VSCROLL_ENVIRONMENT') == 'development':
        print(f"[Qt] {msg_string}")

qInstallMessageHandler(qt_message_handler)

CRASH_LOG_PATH = os.path.abspath('vscroll_crash.log')
_crash_handlers_installed = False


def _format_crash_entry(title: str, exc_info=None) -> str:
    if exc_info is None:
        details = traceback.format_exc()
    else:
        details = ''.join(traceback.format_exception(*exc_info))
    rule = '-' * 72
    stamp = datetime.now().isoformat(sep=' ', timespec='seconds')
    return f"\n{rule}\n[{stamp}] {title}\n{rule}\n{details}\n"


def _append_crash_log(title: str, exc_info=None):
    entry = _format_crash_entry(title, exc_info)
    try:
        with open(CRASH_LOG_PATH, 'a', encoding='utf-8') as f:
            f.write(entry)
    except OSError as log_error:
        print(f"[CRASH] Could not write {CRASH_LOG_PATH}: {log_error}")
        return
    print(f"[CRASH] {title} logged to {CRASH_LOG_PATH}")


def install_crash_handlers():
    """Route uncaught main-thread and worker-thread exceptions to the crash log."""
    global _crash_handlers_installed
    if _crash_handlers_installed:
        return

    previous_hook = sys.excepthook

    def _log_main_thread(exc_type, exc_value, exc_traceback):
        _append_crash_log("Uncaught exception", (exc_type, exc_value, exc_traceback))
        previous_hook(exc_type, exc_value, exc_traceback)

    def _log_worker_thread(args):
        name = args.thread.name if args.thread is not None else 'unknown'
        _append_crash_log(f"Uncaught exception in thread {name}",
                          (args.exc_type, args.exc_value, args.exc_traceback))

    sys.excepthook = _log_main_thread
    threading.excepthook = _log_worker_thread
    _crash_handlers_installed = True


def suppress_warnings():
    """Suppress all warnings when not in a development environment."""
    environment = os.getenv('VSCROLL_ENVIRONMENT')
    if environment == 'development':
        print('Running in development environment.')
        settings.setValue('minimal_trace_logs', False)
        return
    logging.basicConfig(level=logging.ERROR)
    warnings.simplefilter('ignore')


def run_gui(item_count: int | None = None):
    app = QApplication.instance() or QApplication([])
    # The application name is shown in the taskbar.
    app.setApplicationName('vscroll')
    app.setApplicationDisplayName('vscroll')
    app.setStyle('Fusion')

    main_window = DemoWindow(item_count)
    main_window.show()
    return int(app.exec())


if __name__ == '__main__':
    suppress_warnings()
    install_crash_handlers()
    try:
        sys.exit(run_gui())
    except Exception as exception:
        _append_crash_log("Demo aborted", sys.exc_info())
        error_message_box = QMessageBox()
        error_message_box.setWindowTitle('Error')
        error_message_box.setIcon(QMessageBox.Icon.Critical)
        error_message_box.setText(str(exception))
        error_message_box.setDetailedText(traceback.format_exc())
        error_message_box.exec()
        sys.exit(1)
