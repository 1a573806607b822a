# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="hierfilter",
    version="1.2.0",
    description="Filtro jerárquico usuario/líder con búsqueda, selección en cascada y sincronización con dashboards",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["hierfilter*"]),
    package_data={
        "hierfilter.interface.locales": ["*.json"],
    },
    python_requires=">=3.9",
    install_requires=[
        "customtkinter",  # Interfaz gráfica (main.py sin argumentos)
        "requests",  # Puente HTTP con el dashboard
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'hierfilter=hierfilter.main:main',  # CLI con argumentos, GUI sin ellos
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
