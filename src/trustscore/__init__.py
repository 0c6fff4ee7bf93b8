"""trustscore - continuous trust scoring for protected services.

trustscore estimates a 0-100 trust score for each user from recent
behavioral, device-posture and contextual signals, and turns that score
into a risk level and an access decision.

Key modules:

- :mod:`trustscore.scoring` - Feature extraction, risk policy, scoring engine, score history
- :mod:`trustscore.ml` - Synthetic training data, trust models, training and evaluation
- :mod:`trustscore.config` - YAML configuration with pydantic validation
- :mod:`trustscore.cli` - Administrative command line interface
"""

__version__ = "0.1.0"
