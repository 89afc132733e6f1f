"""Interactive console application for importing broker trade history exports."""

import logging
import os
import sys
from typing import cast

from trade_history_importer import ui
from trade_history_importer.config import ImporterSettings, ImportResult
from trade_history_importer.importer import import_trades_from_file

_LOG_LEVEL_ENV_VAR_NAME = "TRADE_HISTORY_IMPORTER_LOG_LEVEL"


class App:
    """Stateful interactive console app holding the last import of the session."""

    def __init__(self, settings: ImporterSettings | None = None) -> None:
        """Initialize settings and empty in-session import result."""
        self.settings = settings or ImporterSettings.load()
        self.import_result: ImportResult | None = None

    def run(self) -> None:
        """Run interactive command loop."""
        while True:
            ui.clear_screen()
            main_menu_action = ui.prompt_for_main_menu_action(self.import_result is not None)
            getattr(self, main_menu_action)()

    def import_file(self) -> None:
        """CLI command: import one trade history file and show its trades."""
        path = ui.prompt_for_import_path()
        if path == ui.BACK:
            return
        with ui.import_progress():
            self.import_result = import_trades_from_file(path, settings=self.settings)
        self.show()

    def show(self) -> None:
        """CLI command: display summary and trades of the last import."""
        result = cast(ImportResult, self.import_result)
        ui.print_import_summary(result)
        if result.trades:
            ui.print_trades(result)
        ui.pause()

    def errors(self) -> None:
        """CLI command: display errors of the last import."""
        result = cast(ImportResult, self.import_result)
        ui.print_import_errors(result.errors, self.settings.max_displayed_errors)
        ui.pause()

    def template(self) -> None:
        """CLI command: display sample export accepted by the importer."""
        ui.print_sample_template()
        ui.pause()

    def exit_app(self) -> None:
        """Exit interactive run loop."""
        self.import_result = None
        sys.exit(0)


def main() -> None:
    """CLI entrypoint with clean Ctrl-C exit code."""
    logging.basicConfig(level=os.environ.get(_LOG_LEVEL_ENV_VAR_NAME, "WARNING").upper())
    app = App()
    try:
        app.run()
    except KeyboardInterrupt:
        app.exit_app()


if __name__ == "__main__":
    main()
