"""
Analyses built on extracted phenology.

- Transition date trends against covariates and years (trends)
- Growing degree day spring model and its calibration (gdd)
- K-means land-cover clustering of pixels (cluster)
"""
