from setuptools import setup

setup(
	name='latentree',
	version='0.1.0',
	packages=['latentree', 'latentree.distributions'],
	description='Structure learning of latent tree models in PyTorch.',
	install_requires=[
		'numpy >= 1.22.2',
		'scipy >= 1.6.2',
		'torch >= 1.9.0',
		'networkx >= 2.8.4',
		'joblib >= 1.1.0',
		'pandas >= 1.3.0'
	],
	extras_require={
		'tests': [
			'pytest',
			'scikit-learn >= 1.0.2'
		]
	}
)
