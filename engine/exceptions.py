# engine/exceptions.py

class AnomalyEngineError(Exception):
    pass


class NotFound(AnomalyEngineError):
    pass


class InvalidStateTransition(AnomalyEngineError):
    def __init__(self, anomaly_id: str, current: str, action: str) -> None:
        super().__init__(f"Cannot {action} anomaly {anomaly_id} in status {current}")
        self.anomaly_id = anomaly_id
        self.current = current
        self.action = action


class UpstreamUnavailable(AnomalyEngineError):
    pass


class PartialRunFailure(AnomalyEngineError):
    def __init__(self, device_id: str, cause: BaseException) -> None:
        super().__init__(f"Detection failed for device {device_id}: {cause}")
        self.device_id = device_id
        self.cause = cause
