from datetime import date, timedelta

import numpy as np

from pixelpheno import Config, apply_grid, extract_phenology

# Two years of 8-day composites with a summer peak, MODIS style integers
dates = [date(2019, 1, 1) + timedelta(days=8 * i) for i in range(91)]
doy = np.array([d.timetuple().tm_yday for d in dates], dtype=float)
ndvi = 0.2 + 0.6 * np.exp(-((doy - 190.0) / 45.0) ** 2)
raw = np.round(ndvi / 0.0001)

samples = list(zip(dates, raw))

config = Config(scale_factor=0.0001, valid_range=(-0.2, 1.0))
for record in extract_phenology(samples, config):
    print(record.year, record.status, {name: r.doy for name, r in record.transitions.items()})

# A 2 x 2 cube: one cell all missing, one cell with a shifted season
cube = np.tile(raw, (2, 2, 1)).astype(float)
cube[0, 1, :] = np.nan
cube[1, 1, :] = np.roll(raw, 3)
result = apply_grid(cube, dates, config)
print(result.layer("start", 2019))
print(result.counts("start"))
