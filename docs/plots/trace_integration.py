import matplotlib.pyplot as plt

from tidychrom.processing import create_integration_pipeline
from tidychrom.simulation import SimulatedTraceFactory

# trace simulation
factory_spec = {
    "grid": {"start": 0.0, "end": 20.0, "size": 2001},
    "channels": [
        [{"center": 8.013, "height": 1000.0, "width": 0.4, "decay": 0.15}],
    ],
    "baseline": {"intercept": 50.0, "slope": 5.0},
    "noise": {"std": 2.0},
}

factory = SimulatedTraceFactory(**factory_spec)
data = factory()

# baseline correction, peak detection and EGH fit
pipeline = create_integration_pipeline("example_integration", subtract_baseline=False)
pipeline.apply(data)

peak = data.peaks[0]
assert data.baseline is not None
assert peak is not None

fig, ax = plt.subplots(figsize=(6, 6))
ax.plot(data.time, data.intensity[:, 0], label="trace")
ax.plot(data.time, data.baseline[:, 0], label="baseline")
ax.plot(data.time, peak.fit + data.baseline[:, 0], label=f"EGH fit (area={peak.area:.1f})")
ax.set_ylabel("Intensity")
ax.set_xlabel("Retention Time")
ax.legend()
