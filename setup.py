from setuptools import setup, find_packages
setup(
    name='secretstack',
    version='0.1.0',
    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    include_package_data=True,
    description='Secret orchestration and injection pipeline for Kubernetes stacks.',
    author='Your Name',
    author_email='youremail@example.com',
    python_requires='>=3.9',
    install_requires=[
        'invoke>=2.0.0',
        'pyyaml>=6.0',
        'pydantic>=2.0.0',
        'python-dotenv>=1.0.0',
        'google-cloud-secret-manager>=2.0.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0.0',
        ],
    },
    entry_points={
        'console_scripts': [
            'secretstack = secretstack.cli:program.run',
        ],
    },
)
