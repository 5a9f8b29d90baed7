from .params import STDDEV_POWER, STDDEV_SLOPE, ParameterStore
from .types import StdDevs


class ConfidenceModel:
    """
    距离 -> 测量标准差。

    s = slope * distance ** power，三个轴取同一个值：距离越远越不可信。
    slope / power 每次调用时从参数表读取，可在线调整。
    """

    def __init__(self, params: ParameterStore) -> None:
        self._params = params

    def stddev(self, distance: float) -> StdDevs:
        s = self._params.get(STDDEV_SLOPE) * (distance ** self._params.get(STDDEV_POWER))
        return StdDevs(s, s, s)
