from setuptools import setup, find_packages

setup(
    name="pyconvex",
    version="0.1.0",
    packages=find_packages(include=["pyconvex", "pyconvex.*"]),
    install_requires=["numpy", "scipy", "matplotlib"],
    extras_require={"test": ["pytest"]},
    author="Your Name",
    description="Convex optimization via Newton's method, the barrier method, and smooth-max feasible point search",
    license="MIT",
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License"
    ]
)
