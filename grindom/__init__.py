"""
Grindom Control - client and service-order tracking for a small business.

Layered the same way throughout:

  grindom/repositories/  pure I/O: loading the dataset from and persisting
                         it to a single JSON file.
  grindom/services/      business logic: CRUD, the status workflow,
                         search filters and revenue analytics.

``grindom.app.build_store`` is the composition root: it reads the config,
creates a :class:`~grindom.repositories.PayloadRepository` and hands it to a
:class:`~grindom.services.DataStore`.  Presentation code holds on to that
store instance and calls its public operations directly.
"""

__version__ = '1.0.0'
