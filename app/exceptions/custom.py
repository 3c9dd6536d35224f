class StoreError(Exception):
    def __init__(self, message: str, operation: str | None = None):
        self.message = message
        self.operation = operation
        super().__init__(message)


class InsightsError(Exception):
    def __init__(self, computation: str, message: str):
        self.computation = computation
        self.message = message
        super().__init__(f"Failed to fetch {computation}: {message}")
