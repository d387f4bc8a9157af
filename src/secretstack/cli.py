"""
secretstack command line entry point.
"""

from invoke import Collection, Program

from . import __version__
from .tasks import secrets

namespace = Collection()
namespace.add_collection(Collection.from_module(secrets), name='secrets')

program = Program(namespace=namespace, name='secretstack', binary='secretstack', version=__version__)
