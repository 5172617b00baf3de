import time
from dataclasses import dataclass, field
from typing import Optional


@dataclass
class StageMetric:
    name: str
    start_time: float
    end_time: Optional[float] = None
    error: Optional[str] = None


@dataclass
class StageTimer:
    start_time: float = field(default_factory=time.time)
    stages: list[StageMetric] = field(default_factory=list)

    def start_stage(self, name: str) -> None:
        self.end_current()
        self.stages.append(StageMetric(name=name, start_time=time.time()))

    def end_current(self, error: Optional[str] = None) -> None:
        if self.stages and self.stages[-1].end_time is None:
            self.stages[-1].end_time = time.time()
            self.stages[-1].error = error

    def get_summary(self) -> dict:
        return {
            "total_time_seconds": time.time() - self.start_time,
            "per_stage": [
                {
                    "stage": s.name,
                    "time_seconds": round((s.end_time or time.time()) - s.start_time, 2),
                    "error": s.error,
                }
                for s in self.stages
            ],
        }

    def print_summary(self, outcome: str) -> None:
        s = self.get_summary()
        print(f"\n{'='*50}")
        print(f"LUNES LOGIN PROBE - {outcome.upper()}")
        print(f"{'='*50}")
        for stage in s["per_stage"]:
            marker = " (failed)" if stage["error"] else ""
            print(f"  {stage['stage']:<24} {stage['time_seconds']:>6.2f}s{marker}")
        print(f"Total time: {s['total_time_seconds']:.1f}s")
        print(f"{'='*50}\n", flush=True)
