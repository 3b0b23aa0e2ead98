import math
from typing import Dict, List, Optional

from trust_lsq._internals.subproblem.status import Status


class Progress_Table:
    """
    逐行输出迭代进度，列宽随内容增长，每20行重复一次表头
    每次求解使用一个新的实例
    """

    def __init__(self) -> None:
        self.rows: int = 0
        self.width: Dict[str, int] = {
            "Iter": 3,
            "RSS": 14,
            "Step": 13,
            "Grad": 9,
            "Delta": 9,
            "Rho": 7,
            "Subproblem": 10,
            "Accepted": 8,
        }

    def format(
        self,
        iter: int,
        rss: float,
        grad_infnorm: float,
        delta: float,
        sub_status: Optional[Status],
        rho: float,
        accepted: Optional[bool],
    ) -> str:
        step = math.nan if sub_status is None else sub_status.size
        data = {
            "Iter": f"{iter: 5d}",
            "RSS": f"{rss: 10.8g}",
            "Step": f"{step:13.6g}",
            "Grad": f"{grad_infnorm:6.4g}",
            "Delta": f"{delta:9.3g}",
            "Rho": f"{rho:7.3g}",
            "Subproblem": "None" if sub_status is None else sub_status.flag.name,
            "Accepted": "" if accepted is None else ("yes" if accepted else "no"),
        }
        output: List[str] = []
        for k, v in data.items():
            _width = max(self.width[k], len(k), len(v))
            output.append(" " * (_width - len(v)) + v)
            self.width[k] = _width
        _output = "  ".join(output)
        if self.rows % 20 == 0:
            label: List[str] = []
            for k in data:
                _width = self.width[k]
                label.append(" " * (_width - len(k)) + k)
            _output = "\n" + "  ".join(label) + "\n\n" + _output
        self.rows += 1
        return _output
