from pathlib import Path

from setuptools import setup, find_packages


def get_requirements():
    with open(Path(__file__).parent / "requirements.txt") as f:
        return [
            line.strip()
            for line in f
            if line.strip() and not line.startswith(("#", "-"))
        ]


setup(
    name="svgmin",
    version="0.1.0",
    description="CSS cascade resolution and transform minification for SVG documents",
    author="Boris Malashenko",
    author_email="btmalashenko@itmo.ru",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    entry_points={
        'console_scripts': [
            'svgmin = svgmin.main:main',
        ],
    },
    install_requires=get_requirements(),
    extras_require={
        "test": ["pytest"],
    },
)
