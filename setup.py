from setuptools import setup, find_packages

with open("Readme.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="watchman-gauge-agent",
    version="1.0.0",
    author="Watchman",
    author_email="support@watchman.bj",
    description="Agent qui envoie périodiquement l'utilisation des ressources système (CPU, mémoire, disques) à un collecteur de métriques.",
    long_description=long_description,
    long_description_content_type='text/markdown',
    include_package_data=True,
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires='>=3.8',
    install_requires=[
        "requests>=2.28.0",
        "configparser>=5.3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },

    entry_points='''
        [console_scripts]
        watchman-gauge-agent=gauge_agent.main:main
    '''
)
