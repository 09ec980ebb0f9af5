"""
Qt-side models and workers for the Fibre Monitor dashboard.

Rendering widgets are provided by the charting front end; this package
holds the QObject models they bind to.
"""
