"""
Packaging script for PyPI.
"""
import os, setuptools

setuptools.setup(
	name='retrofit-sandbox',
	version='0.1.0',
	packages=['retrofit', ],
	package_data={
		'retrofit': ["lessons/"+f for f in os.listdir("retrofit/lessons")],
	},
	entry_points={
		'console_scripts': ["retrofit = retrofit.cmdline:main"],
	},
	license='MIT',
	description='A sandbox for learning about protocols, records, types, and retroactive extension, one form at a time',
	long_description=open('README.md').read(),
	long_description_content_type="text/markdown",
	classifiers=[
		"Programming Language :: Python :: 3.9",
		"License :: OSI Approved :: MIT License",
		"Operating System :: OS Independent",
		"Development Status :: 3 - Alpha",
		"Intended Audience :: Developers",
		"Intended Audience :: Education",
		"Topic :: Education",
		"Environment :: Console",
	],
	python_requires='>=3.9',
	install_requires=[
		"booze-tools>=0.6.2.1",
	],
)
