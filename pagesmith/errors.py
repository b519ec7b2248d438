class PagesmithError(Exception):
    """Base class for errors reported to the user by the CLI."""


class FolderNotFound(PagesmithError):
    def __init__(self, path):
        super().__init__(f"Folder '{path}' does not exist.")
        self.path = path


class OutputFolderNotFound(PagesmithError):
    def __init__(self, path):
        super().__init__(
            f"Output folder '{path}' not found. "
            "Run 'pagesmith generate' first, or check the [site] output_dir setting."
        )
        self.path = path


class WatchFolderNotFound(PagesmithError):
    def __init__(self, path):
        super().__init__(f"Live reload folder '{path}' not found.")
        self.path = path


class ServerError(PagesmithError):
    """The preview server could not start, or exited while serving."""


class PortInUse(ServerError):
    def __init__(self, port: int):
        super().__init__(
            f"A localhost server is already running on port number {port}.\n"
            "- Perhaps another 'pagesmith run' session is running?\n"
            "- pagesmith uses Python's http.server module, so to find any\n"
            "  running processes you can use the 'ps' command (or Activity\n"
            "  Monitor / Task Manager) and search for 'http.server'. You can\n"
            "  then terminate the previous process, or pass a different\n"
            "  port with '--port'."
        )
        self.port = port


class ServerStartFailure(ServerError):
    pass


class FingerprintError(PagesmithError):
    pass


class GenerationError(PagesmithError):
    pass


class ProjectExistsError(PagesmithError):
    def __init__(self, path):
        super().__init__(f"'{path}' already contains a pagesmith project.")
        self.path = path
