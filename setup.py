from setuptools import setup, find_packages

setup(
    name="tagsearch",
    version="0.1.0",
    python_requires=">=3.7, <4",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    entry_points={"console_scripts": ["tagsearch = tagsearch._cli:main"]},
    install_requires=[
        'ansimarkup>=1.4,<3',
        'braceexpand>=0.1.5,<1',
        'click>=8.0,<9',
        'graphviz>=0.13.2,<1',
        'jinja2>=3.0,<4',
        'pyparsing>=3.0,<4',
    ],
    extras_require={
        'test': ['pytest>=7']
    }
)
