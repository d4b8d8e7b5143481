"""
Identity allocation and account creation for the chat platform directory.

This package mints account identities (a username paired with a four-digit
discriminator), applies the abuse heuristics that run before an account is
created, and persists the account together with its settings record. Housing
these components in one library keeps accounts represented and created
consistently by every service that registers users.

Quick start
-----------

1. Install this package into your virtual environment.
2. Create the application with :func:`userdir.factory.create_web_app`, or
   attach the persistence layer to an existing Flask app with
   :func:`userdir.util.init_app`.
3. Build a :class:`.domain.RegistrationPolicy` once from configuration and
   pass it to :func:`userdir.accounts.register`.

.. code-block:: python

   from userdir import accounts, domain

   policy = domain.RegistrationPolicy.from_config(app.config)
   registration = domain.Registration(username='alice',
                                      password='longenough1',
                                      consent=True)
   with app.app_context():
       account = accounts.register(registration, policy, ip='10.0.0.1')
"""

from .domain import Account, PublicAccount, PrivateAccount, Settings, \
    Registration, RegistrationPolicy, FieldError
